"""Interpretation of free-text chat input.

All matching is done on text that is lower-cased and trimmed first.
"""

from enum import Enum
from typing import Optional

from itp_bot.application.errors import InvalidInputError
from itp_bot.domain.services.tax_rate_table import REGIONS

RESET_COMMANDS = frozenset({"reset", "inicio", "restart", "empezar"})
HELP_COMMANDS = frozenset({"ayuda", "help"})
RATES_COMMANDS = frozenset({"tasas", "precios", "tarifas"})
AFFIRMATIVE_ANSWERS = frozenset({"si", "sí", "yes", "s"})
SKIP_YEAR_KEYWORDS = frozenset({"saltar", "skip"})

MIN_YEAR = 1990
MAX_YEAR = 2026


class Command(str, Enum):
    """Global commands accepted at any step."""

    RESET = "reset"
    HELP = "help"
    RATES = "rates"


def normalize_text(message: str) -> str:
    """Lower-case and trim a raw message."""
    return (message or "").lower().strip()


def detect_command(text: str) -> Optional[Command]:
    """
    Detect a global command.

    Args:
        text: Normalised message text

    Returns:
        The command, or None when the text is regular step input
    """
    if text in RESET_COMMANDS:
        return Command.RESET
    if text in HELP_COMMANDS:
        return Command.HELP
    if text in RATES_COMMANDS:
        return Command.RATES
    return None


def _parse_int(text: str) -> Optional[int]:
    # Plain ASCII digits only: int() would also take "+7", "2_020" and non-Latin digits.
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def parse_year(text: str) -> Optional[int]:
    """
    Parse the answer to the year question.

    Args:
        text: Normalised message text

    Returns:
        The year, or None when the user asked to skip it

    Raises:
        InvalidInputError: If the text is neither a skip keyword nor a year in range
    """
    if text in SKIP_YEAR_KEYWORDS:
        return None
    year = _parse_int(text)
    if year is None or year < MIN_YEAR or year > MAX_YEAR:
        raise InvalidInputError(f"Invalid year: {text!r}")
    return year


def parse_selection(text: str, count: int) -> int:
    """
    Parse a 1-based choice from a list of `count` options.

    Returns:
        Zero-based index of the chosen option

    Raises:
        InvalidInputError: If the text is not a number in [1, count]
    """
    selection = _parse_int(text)
    if selection is None or selection < 1 or selection > count:
        raise InvalidInputError(f"Selection out of range: {text!r}")
    return selection - 1


def match_region(text: str) -> Optional[str]:
    """
    Resolve a region from a number or a partial name.

    A number selects by position in the region table. Otherwise the first region
    (in table order) whose lower-cased name contains the text, or is contained
    in it, wins. Matching is plain substring: accents must match.

    Args:
        text: Normalised message text

    Returns:
        Canonical region name, or None if nothing matches
    """
    if not text:
        return None

    number = _parse_int(text)
    if number is not None and 1 <= number <= len(REGIONS):
        return REGIONS[number - 1].name

    for rule in REGIONS:
        name = rule.name.lower()
        if text in name or name in text:
            return rule.name
    return None


def is_affirmative(text: str) -> bool:
    """Whether the text is a yes; anything unrecognised counts as no."""
    return text in AFFIRMATIVE_ANSWERS
