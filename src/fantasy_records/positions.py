from __future__ import annotations

from dataclasses import dataclass

from .config import POSITION_MAP
from .errors import MissingDataError
from .models import MatchupTeam, NFLPlayer


@dataclass(slots=True)
class _Candidate:
    player_id: str
    positions: frozenset[str]
    score: float
    used: bool = False


def slot_eligibility(slot: str) -> frozenset[str]:
    try:
        return frozenset(POSITION_MAP[slot])
    except KeyError:
        raise MissingDataError(f"Unknown roster slot {slot}") from None


def optimize_score(
    player_ids: list[str],
    players: dict[str, NFLPlayer],
    player_points: dict[str, float],
    roster_slots: list[str],
) -> float:
    """Best starting-lineup score reachable from ``player_ids``.

    Greedy: slots with the fewest eligible positions are filled first, each
    with the highest-scoring unused eligible player. Players without a score
    count as 0. A slot nobody can fill adds nothing.
    """
    candidates: list[_Candidate] = []
    for player_id in player_ids:
        player = players.get(player_id)
        if player is None:
            raise MissingDataError(f"Player {player_id} is missing from the NFL directory")
        candidates.append(
            _Candidate(
                player_id=player_id,
                positions=frozenset(player.eligible_positions),
                score=player_points.get(player_id, 0.0),
            )
        )
    candidates.sort(key=lambda c: c.score, reverse=True)

    slots = sorted((slot_eligibility(slot) for slot in roster_slots), key=len)

    total = 0.0
    for eligible in slots:
        chosen = next((c for c in candidates if not c.used and c.positions & eligible), None)
        if chosen is None:
            continue
        chosen.used = True
        total += chosen.score
    return total


def potential_score(side: MatchupTeam, players: dict[str, NFLPlayer], roster_slots: list[str]) -> float | None:
    if side.player_data is None:
        return None
    return optimize_score(
        side.player_data.candidate_pool(),
        players,
        side.player_data.player_points,
        roster_slots,
    )
