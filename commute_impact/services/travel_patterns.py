"""Travel pattern resolver.

Maps the single travel-pattern choice from the calculator form to its
timing and frequency classes. The table is fixed; unknown identifiers
are rejected rather than defaulted.
"""

from __future__ import annotations

from typing import List

from ..domain.errors import InvalidPatternError
from ..domain.methodology import TRAVEL_PATTERNS
from ..domain.models import TravelPattern


def resolve_travel_pattern(identifier: str) -> TravelPattern:
    """Resolve a travel-pattern identifier.

    Args:
        identifier: Pattern identifier such as 'daily-commute'.

    Returns:
        The TravelPattern with its timing and frequency classes.

    Raises:
        InvalidPatternError: If the identifier is not in the pattern table.
    """
    key = identifier.strip() if isinstance(identifier, str) else ""
    axes = TRAVEL_PATTERNS.get(key)
    if axes is None:
        raise InvalidPatternError(
            f"Unknown travel pattern: {identifier!r}. "
            f"Choose one of: {', '.join(TRAVEL_PATTERNS)}",
            field_name="travel_pattern",
            pattern=str(identifier),
        )

    timing, frequency = axes
    return TravelPattern(identifier=key, timing=timing, frequency=frequency)


def list_travel_patterns() -> List[TravelPattern]:
    """Return every known travel pattern in display order."""
    return [resolve_travel_pattern(identifier) for identifier in TRAVEL_PATTERNS]
