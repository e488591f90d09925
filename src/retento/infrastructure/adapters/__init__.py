# Storage adapters
from .yaml_store import YamlDeckRepository

__all__ = ["YamlDeckRepository"]
