"""
Format Rules: Single Source of Truth

Which event formats support which structures, heat sizing limits, structure naming,
and the round-robin pairing schedule. All other modules must import from here.
"""

import os
from typing import Any, FrozenSet, List, Sequence, Tuple

from competition_engine.models.event import EventFormat

# =============================================================================
# Format Matrix
# =============================================================================

HEAT_FORMATS: FrozenSet[str] = frozenset({EventFormat.tests.value})
GROUP_FORMATS: FrozenSet[str] = frozenset({EventFormat.groups.value, EventFormat.groups_knockout.value})
BRACKET_FORMATS: FrozenSet[str] = frozenset({EventFormat.single_elimination.value})


def _format_value(event_format: Any) -> str:
    return event_format.value if isinstance(event_format, EventFormat) else str(event_format)


def supports_heats(event_format: Any) -> bool:
    return _format_value(event_format) in HEAT_FORMATS


def supports_groups(event_format: Any) -> bool:
    return _format_value(event_format) in GROUP_FORMATS


def supports_bracket(event_format: Any) -> bool:
    return _format_value(event_format) in BRACKET_FORMATS


# =============================================================================
# Heat Sizing
# =============================================================================

MAX_PLAYERS_PER_HEAT = 50
DEFAULT_PLAYERS_PER_HEAT = int(os.getenv("DEFAULT_PLAYERS_PER_HEAT", "8"))

GENERATION_KIND_HEATS = "heats"
GENERATION_KIND_BRACKET = "bracket"


def heat_count(registration_count: int, players_per_heat: int) -> int:
    """ceil(registration_count / players_per_heat)."""
    return -(-registration_count // players_per_heat)


def structure_name(index: int) -> str:
    """
    Name for the index-th group or heat (0-based).

    A..Z, then AA, AB, ... AZ, BA, ... (index 26 -> "AA").
    """
    if index < 26:
        return chr(65 + index)
    return chr(65 + index // 26 - 1) + chr(65 + index % 26)


# =============================================================================
# Round Robin (circle method)
# =============================================================================


class _Bye:
    """Placeholder occupying the extra circle position when the item count is odd."""

    def __repr__(self) -> str:
        return "BYE"


BYE = _Bye()


def rr_match_count(n: int) -> int:
    """Return number of RR matches for n competitors: C(n, 2) = n*(n-1)/2."""
    return (n * (n - 1)) // 2


def rr_round_count(n: int) -> int:
    """
    Return number of RR rounds for n competitors.
    Even n: n-1 rounds. Odd n: n rounds (one BYE per round).
    """
    if n % 2 == 0:
        return n - 1
    return n


def round_robin(n: int, items: Sequence[Any]) -> List[List[Tuple[Any, Any]]]:
    """
    Round-robin schedule. Returns a list of rounds, each a list of (a, b) pairs.

    Circle method: position 0 stays fixed, positions 1..n2-1 rotate one step per
    round, and position i plays position n2-1-i. For odd n a BYE occupies the
    extra position; the pair containing it is kept in the round (the caller
    decides what a bye means) and does not count as a match.

    Deterministic: the same ordered input always yields the same rounds and the
    same pair order. Shuffling, if wanted, belongs to the caller.
    """
    if n != len(items):
        raise ValueError(f"round_robin: n={n} does not match {len(items)} items")
    if n < 2:
        raise ValueError(f"round_robin: need at least 2 items, got {n}")

    positions: List[Any] = list(items)
    if n % 2 == 1:
        positions.append(BYE)
    n2 = len(positions)
    half = n2 // 2

    rounds: List[List[Tuple[Any, Any]]] = []
    for _ in range(n2 - 1):
        pairs = [(positions[i], positions[n2 - 1 - i]) for i in range(half)]
        rounds.append(pairs)
        # Rotate: keep first, move last to second, shift the rest
        positions = [positions[0]] + [positions[-1]] + positions[1:-1]

    return rounds


def is_bye_pair(pair: Tuple[Any, Any]) -> bool:
    return pair[0] is BYE or pair[1] is BYE
