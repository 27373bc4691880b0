from typing import List, Sequence

from backend.schemas import HackathonRecord

# strategy -> (key, descending). sorted() stays stable with reverse=True,
# so records with equal keys keep their input order.
SORT_STRATEGIES = {
    "latest": (lambda h: h.start_date, True),
    "ending-soon": (lambda h: h.end_date, False),
    "prize-desc": (lambda h: h.prize_amount or 0, True),
    "prize-asc": (lambda h: h.prize_amount or 0, False),
    "popular": (lambda h: h.registrations or 0, True),
}


def sort_hackathons(hackathons: Sequence[HackathonRecord], strategy: str) -> List[HackathonRecord]:
    """Return a new list ordered by the named strategy. The input is left untouched."""
    try:
        key, descending = SORT_STRATEGIES[strategy]
    except KeyError:
        raise ValueError(
            f"Unknown sort strategy '{strategy}'. Expected one of: {', '.join(SORT_STRATEGIES)}"
        ) from None
    return sorted(hackathons, key=key, reverse=descending)
