"""
Predicate evaluation for hackathon discovery.

Fields combine with AND. Within a field, checkbox selections and search tokens
are two separate clauses that must both pass; each clause is an OR over its
own values.
"""
import operator
from typing import Iterable, List, Optional, Sequence

from backend.schemas import PRIZE_RANGES, FilterState, HackathonRecord, ParsedTokens

PRIZE_OPERATORS = {
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "=": operator.eq,
}


def matches_choice(value: Optional[str], selected: Iterable[str], token_values: Sequence[str]) -> bool:
    selected = set(selected)
    if selected and value not in selected:
        return False
    if token_values:
        if value is None:
            return False
        lowered = value.lower()
        if not any(lowered == t.lower() for t in token_values):
            return False
    return True


def matches_text(hackathon: HackathonRecord, text: str) -> bool:
    needle = text.strip().lower()
    if not needle:
        return True
    haystacks = (hackathon.title, hackathon.description, hackathon.organizer, hackathon.location)
    if any(needle in (h or "").lower() for h in haystacks):
        return True
    return any(tag.lower() == needle for tag in hackathon.tags)


def matches_organizer(hackathon: HackathonRecord, organizers: Sequence[str]) -> bool:
    if not organizers:
        return True
    name = (hackathon.organizer or "").lower()
    return any(o.lower() in name for o in organizers)


def matches_tags(hackathon: HackathonRecord, tags: Sequence[str]) -> bool:
    if not tags:
        return True
    own = {t.lower() for t in hackathon.tags}
    return any(t.lower() in own for t in tags)


def matches_prize_ranges(hackathon: HackathonRecord, selected_ranges: Iterable[int]) -> bool:
    selected_ranges = sorted(selected_ranges)
    if not selected_ranges:
        return True
    prize = hackathon.prize_amount or 0
    return any(PRIZE_RANGES[i].contains(prize) for i in selected_ranges)


def matches_prize_token(hackathon: HackathonRecord, tokens: ParsedTokens) -> bool:
    if not tokens.has_prize_filter:
        return True
    compare = PRIZE_OPERATORS[tokens.prize_op]
    return compare(hackathon.prize_amount or 0, tokens.prize_val)


def matches_date_window(hackathon: HackathonRecord, state: FilterState) -> bool:
    date_from, date_to = state.date_from, state.date_to
    if date_from and date_to and date_from > date_to:
        return False
    if date_from and hackathon.end_date < date_from:
        return False
    if date_to and hackathon.start_date > date_to:
        return False
    return True


def matches(hackathon: HackathonRecord, state: FilterState, tokens: ParsedTokens) -> bool:
    """Return True if the hackathon passes every active filter."""
    return (
        matches_choice(hackathon.category, state.selected_categories, tokens.category)
        and matches_choice(hackathon.status, state.selected_statuses, tokens.status)
        and matches_choice(hackathon.difficulty, state.selected_difficulties, tokens.difficulty)
        and matches_choice(hackathon.mode, state.selected_modes, tokens.mode)
        and matches_text(hackathon, tokens.text)
        and matches_organizer(hackathon, tokens.organizer)
        and matches_tags(hackathon, tokens.tag)
        and matches_prize_ranges(hackathon, state.selected_prize_ranges)
        and matches_prize_token(hackathon, tokens)
        and matches_date_window(hackathon, state)
    )


def filter_hackathons(
    hackathons: Sequence[HackathonRecord],
    state: FilterState,
    tokens: ParsedTokens,
) -> List[HackathonRecord]:
    return [h for h in hackathons if matches(h, state, tokens)]
