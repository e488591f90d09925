from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

CONFIG_DIR_NAME = ".config/retento"


def default_config_file() -> Path:
    return Path.home() / CONFIG_DIR_NAME / "config.toml"


class AppConfig(BaseSettings):
    """
    Configuration model for retento.
    Supports loading from:
    1. Environment variables (RETENTO_*)
    2. Config file (~/.config/retento/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="RETENTO_",
        extra="ignore",
    )

    deck_path: Path = Field(default_factory=lambda: Path.home() / CONFIG_DIR_NAME / "deck.yaml")

    # Server
    host: str = "127.0.0.1"
    port: int = 8787

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Earlier sources win: CLI overrides, then env, then the TOML file
        toml_file = default_config_file()
        if toml_file.exists():
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("deck_path", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path:
        return Path(v).expanduser()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/retento/config.toml (if exists)
    3. Environment variables (RETENTO_*)
    4. cli_overrides (passed from Typer); None values are ignored
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
