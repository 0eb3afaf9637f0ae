"""
Single Elimination Bracket Planning (pure, no DB)

Computes bracket size, byes, standard seed placement and the full match plan with
winner/loser wiring. ``bracket_service`` persists the plan.

Seed placement for size 8 (slot order, top to bottom):
    1 v 8, 4 v 5, 2 v 7, 3 v 6
Missing seeds (n+1..size) are byes, so byes always meet the top seeds.
"""

import random
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple


@dataclass
class SeedAssignment:
    registration_id: int
    seed: int


@dataclass
class SeedCheck:
    valid: bool
    invalid_id: Optional[int] = None
    error: Optional[str] = None


@dataclass
class PlannedMatch:
    round: int
    match_number: int
    bracket_position: int
    registration1_id: Optional[int] = None
    registration2_id: Optional[int] = None
    winner_to: Optional[int] = None  # bracket_position of the target match
    winner_to_slot: Optional[int] = None
    loser_to: Optional[int] = None
    loser_to_slot: Optional[int] = None
    is_bye: bool = False
    is_third_place: bool = False

    @property
    def bye_winner(self) -> Optional[int]:
        if not self.is_bye:
            return None
        return self.registration1_id if self.registration1_id is not None else self.registration2_id


@dataclass
class BracketPlan:
    matches: List[PlannedMatch] = field(default_factory=list)
    total_rounds: int = 0
    bracket_size: int = 0
    bye_count: int = 0


# =============================================================================
# Sizing
# =============================================================================


def next_power_of_two(n: int) -> int:
    """Round up to next power of 2."""
    p = 1
    while p < n:
        p *= 2
    return p


def bracket_size(registration_count: int) -> int:
    return next_power_of_two(registration_count)


def bye_count(registration_count: int) -> int:
    return bracket_size(registration_count) - registration_count


def round_count(size: int) -> int:
    """log2(size) for a power of two."""
    return size.bit_length() - 1


# =============================================================================
# Seeds
# =============================================================================


def validate_seeds(seeds: Optional[Sequence[SeedAssignment]], registration_ids: Sequence[int]) -> SeedCheck:
    """
    Every seeded registration must be one of ``registration_ids``; no registration
    and no seed rank may appear twice. Reports the first offending registration id
    in input order.
    """
    if not seeds:
        return SeedCheck(valid=True)

    known = set(registration_ids)
    seen_registrations = set()
    seen_ranks = set()
    for s in seeds:
        if s.registration_id not in known:
            return SeedCheck(False, s.registration_id, f"Invalid registration ID in seeds: {s.registration_id}")
        if s.registration_id in seen_registrations:
            return SeedCheck(False, s.registration_id, f"Registration {s.registration_id} is seeded twice")
        if s.seed in seen_ranks:
            return SeedCheck(False, s.registration_id, f"Seed {s.seed} is assigned more than once")
        if s.seed < 1:
            return SeedCheck(False, s.registration_id, f"Seed must be a positive integer, got {s.seed}")
        seen_registrations.add(s.registration_id)
        seen_ranks.add(s.seed)
    return SeedCheck(valid=True)


def seed_order(size: int) -> List[int]:
    """
    Seed number held by each bracket slot, top to bottom.

    Built by doubling: every seed s in the current order is followed by its
    complement (2*len + 1 - s). [1, 2] -> [1, 4, 2, 3] -> [1, 8, 4, 5, 2, 7, 3, 6].
    """
    if size <= 1:
        return [1]
    slots = [1, 2]
    while len(slots) < size:
        total = len(slots) * 2 + 1
        slots = [x for s in slots for x in (s, total - s)]
    return slots


def seed_positions(size: int) -> List[int]:
    """Inverse of ``seed_order``: positions[seed - 1] = 0-based slot of that seed."""
    positions = [0] * size
    for slot_index, seed in enumerate(seed_order(size)):
        positions[seed - 1] = slot_index
    return positions


def order_registrations(
    registration_ids: Sequence[int],
    seeds: Optional[Sequence[SeedAssignment]] = None,
    shuffle: bool = False,
    rng: Optional[random.Random] = None,
) -> List[int]:
    """Seeded registrations by rank, then the unseeded ones (shuffled if requested)."""
    rank_by_id: Dict[int, int] = {s.registration_id: s.seed for s in (seeds or [])}
    seeded = sorted((rid for rid in registration_ids if rid in rank_by_id), key=lambda rid: rank_by_id[rid])
    unseeded = [rid for rid in registration_ids if rid not in rank_by_id]
    if shuffle:
        (rng or random.Random()).shuffle(unseeded)
    return seeded + unseeded


def place_in_slots(ordered_ids: Sequence[int], size: int) -> List[Optional[int]]:
    """The i-th registration takes the slot of seed i+1; remaining slots are byes (None)."""
    positions = seed_positions(size)
    slots: List[Optional[int]] = [None] * size
    for i, rid in enumerate(ordered_ids):
        slots[positions[i]] = rid
    return slots


# =============================================================================
# Bracket plan
# =============================================================================


def build_single_elimination(ordered_ids: Sequence[int], has_third_place_match: bool = False) -> BracketPlan:
    """
    Full single elimination plan for ``ordered_ids`` (best seed first).

    Round 1 pairs adjacent slots. Later rounds are created empty and wired with
    winner_to / winner_to_slot (slot 1 from the even-indexed feeder, slot 2 from
    the odd one). Bye winners are pre-advanced into their round 2 slot.
    The third place match, when requested, is round ``total_rounds`` match 2 and
    takes the semifinal losers.
    """
    n = len(ordered_ids)
    if n < 2:
        raise ValueError("At least 2 participants required for single elimination")

    size = bracket_size(n)
    total_rounds = round_count(size)
    slots = place_in_slots(ordered_ids, size)

    matches: List[PlannedMatch] = []
    positions_by_round: Dict[int, List[int]] = defaultdict(list)
    position = 1

    for i in range(size // 2):
        reg1, reg2 = slots[2 * i], slots[2 * i + 1]
        matches.append(
            PlannedMatch(
                round=1,
                match_number=i + 1,
                bracket_position=position,
                registration1_id=reg1,
                registration2_id=reg2,
                is_bye=(reg1 is None) != (reg2 is None),
            )
        )
        positions_by_round[1].append(position)
        position += 1

    for rnd in range(2, total_rounds + 1):
        for i in range(len(positions_by_round[rnd - 1]) // 2):
            matches.append(PlannedMatch(round=rnd, match_number=i + 1, bracket_position=position))
            positions_by_round[rnd].append(position)
            position += 1

    by_position = {m.bracket_position: m for m in matches}
    for rnd in range(1, total_rounds):
        next_positions = positions_by_round[rnd + 1]
        for i, pos in enumerate(positions_by_round[rnd]):
            by_position[pos].winner_to = next_positions[i // 2]
            by_position[pos].winner_to_slot = 1 if i % 2 == 0 else 2

    # With 3 entrants one semifinal is a bye and has no loser
    if has_third_place_match and n >= 4:
        third_place = PlannedMatch(
            round=total_rounds,
            match_number=2,
            bracket_position=position,
            is_third_place=True,
        )
        matches.append(third_place)
        for i, pos in enumerate(positions_by_round[total_rounds - 1]):
            by_position[pos].loser_to = third_place.bracket_position
            by_position[pos].loser_to_slot = 1 if i % 2 == 0 else 2

    for target_position, slot, winner in bye_advancements(matches):
        target = by_position[target_position]
        if slot == 1:
            target.registration1_id = winner
        else:
            target.registration2_id = winner

    return BracketPlan(matches=matches, total_rounds=total_rounds, bracket_size=size, bye_count=size - n)


def bye_advancements(matches: Sequence[PlannedMatch]) -> List[Tuple[int, int, int]]:
    """(target bracket_position, slot, registration_id) for every decided bye."""
    result: List[Tuple[int, int, int]] = []
    for m in matches:
        winner = m.bye_winner
        if winner is not None and m.winner_to is not None and m.winner_to_slot is not None:
            result.append((m.winner_to, m.winner_to_slot, winner))
    return result
