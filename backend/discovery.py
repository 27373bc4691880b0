import logging
from collections import Counter
from typing import Dict, List, Sequence

from pydantic import BaseModel

from backend.filters import filter_hackathons
from backend.query import tokenize
from backend.schemas import PRIZE_RANGES, STATUSES, FilterState, HackathonRecord, ParsedTokens
from backend.sorting import sort_hackathons

logger = logging.getLogger(__name__)


class DiscoveryResult(BaseModel):
    hackathons: List[HackathonRecord]
    tokens: ParsedTokens
    total: int
    active_filters: List[str]


def describe_active_filters(state: FilterState, tokens: ParsedTokens) -> List[str]:
    """Labels for the filter chips shown above the results."""
    chips = []
    for label, values in (
        ("category", sorted(state.selected_categories)),
        ("status", sorted(state.selected_statuses)),
        ("difficulty", sorted(state.selected_difficulties)),
        ("mode", sorted(state.selected_modes)),
    ):
        chips.extend(f"{label}: {v}" for v in values)

    chips.extend(PRIZE_RANGES[i].label for i in sorted(state.selected_prize_ranges))

    for key in ("status", "category", "difficulty", "mode", "organizer", "tag"):
        chips.extend(f"{key}:{v}" for v in getattr(tokens, key))
    if tokens.has_prize_filter:
        chips.append(f"prize:{tokens.prize_op}{tokens.prize_val}")

    if state.date_from:
        chips.append(f"from {state.date_from.date().isoformat()}")
    if state.date_to:
        chips.append(f"until {state.date_to.date().isoformat()}")
    if tokens.text.strip():
        chips.append(f'"{tokens.text.strip()}"')
    return chips


def count_by_status(hackathons: Sequence[HackathonRecord]) -> Dict[str, int]:
    counts = Counter(h.status for h in hackathons)
    return {status: counts.get(status, 0) for status in STATUSES}


def discover(hackathons: Sequence[HackathonRecord], state: FilterState) -> DiscoveryResult:
    """
    Run the search text through the tokenizer, filter the hackathons against
    the tokens and checkbox selections, then order them by ``state.sort_by``.
    """
    tokens = tokenize(state.search_text)
    filtered = filter_hackathons(hackathons, state, tokens)
    ordered = sort_hackathons(filtered, state.sort_by)
    logger.debug(
        f"Discovery matched {len(ordered)} of {len(hackathons)} hackathons "
        f"(query={state.search_text!r}, sort={state.sort_by})"
    )
    return DiscoveryResult(
        hackathons=ordered,
        tokens=tokens,
        total=len(ordered),
        active_filters=describe_active_filters(state, tokens),
    )
