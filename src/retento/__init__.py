"""retento: SM-2 spaced-repetition scheduling for flashcard decks."""

from retento.consts import VERSION

__version__ = VERSION
