import json
from datetime import datetime, timezone
from typing import List, Literal, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Status = Literal["upcoming", "live", "past"]
SortKey = Literal["latest", "ending-soon", "prize-desc", "prize-asc", "popular"]
PrizeOp = Literal[">", "<", ">=", "<=", "="]

SORT_KEYS = ("latest", "ending-soon", "prize-desc", "prize-asc", "popular")
STATUSES = ("upcoming", "live", "past")
DIFFICULTIES = ("Beginner", "Intermediate", "Advanced")
MODES = ("Online", "Offline", "Hybrid")
CATEGORIES = (
    "Web Development",
    "Mobile",
    "AI/ML",
    "Cloud",
    "Blockchain",
    "IoT",
    "Gaming",
    "Cybersecurity",
    "Healthcare",
    "Education",
    "Finance",
    "Social Impact",
    "Other",
)


def ensure_utc(value: datetime) -> datetime:
    """Naive timestamps are stored and sent as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_tags(value) -> List[str]:
    """
    Accepts a list, a comma separated string (how tags are stored in the
    database) or a JSON array string. Non-string and blank entries are dropped.
    """
    if not value:
        return []
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("["):
            try:
                value = json.loads(stripped)
            except json.JSONDecodeError:
                return []
            if not isinstance(value, list):
                return []
        else:
            value = stripped.split(",")
    return [tag.strip() for tag in value if isinstance(tag, str) and tag.strip()]


class PrizeRange(BaseModel):
    label: str
    min: int
    max: Optional[int] = None

    def contains(self, amount: int) -> bool:
        if amount < self.min:
            return False
        return self.max is None or amount <= self.max


PRIZE_RANGES = [
    PrizeRange(label="Under 5k", min=0, max=4999),
    PrizeRange(label="5k - 10k", min=5000, max=10000),
    PrizeRange(label="10k - 25k", min=10001, max=25000),
    PrizeRange(label="25k - 50k", min=25001, max=50000),
    PrizeRange(label="Above 50k", min=50001),
]


class HackathonBase(BaseModel):
    id: str
    title: str
    description: str = ""
    organizer: str = ""
    location: str = ""
    category: str = "Other"
    difficulty: Optional[str] = None
    mode: Optional[str] = None
    tags: List[str] = []
    prize_amount: Optional[int] = Field(default=None, ge=0)
    start_date: datetime
    end_date: datetime
    registrations: Optional[int] = Field(default=None, ge=0)
    banner_url: Optional[str] = None

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_validator("description", "organizer", "location", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v):
        return parse_tags(v)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v):
        return ensure_utc(v)


class Hackathon(HackathonBase):
    """A stored hackathon, as seeded or upserted."""
    publish_status: Literal["draft", "published"] = "published"


class HackathonRecord(HackathonBase):
    """Read-only summary handed to the discovery pipeline."""
    status: Status


class FilterState(BaseModel):
    search_text: str = ""
    selected_categories: Set[str] = Field(default_factory=set)
    selected_statuses: Set[str] = Field(default_factory=set)
    selected_difficulties: Set[str] = Field(default_factory=set)
    selected_modes: Set[str] = Field(default_factory=set)
    selected_prize_ranges: Set[int] = Field(default_factory=set)
    sort_by: SortKey = "latest"
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("selected_prize_ranges")
    @classmethod
    def check_prize_range_indices(cls, v):
        for index in v:
            if not 0 <= index < len(PRIZE_RANGES):
                raise ValueError(f"prize range index {index} out of range 0..{len(PRIZE_RANGES) - 1}")
        return v

    @field_validator("date_from", "date_to")
    @classmethod
    def normalize_window(cls, v):
        return ensure_utc(v) if v is not None else v


class ParsedTokens(BaseModel):
    text: str = ""
    status: List[str] = Field(default_factory=list)
    category: List[str] = Field(default_factory=list)
    difficulty: List[str] = Field(default_factory=list)
    mode: List[str] = Field(default_factory=list)
    organizer: List[str] = Field(default_factory=list)
    tag: List[str] = Field(default_factory=list)
    prize_op: Optional[PrizeOp] = None
    prize_val: Optional[int] = None

    @property
    def has_prize_filter(self) -> bool:
        return self.prize_op is not None and self.prize_val is not None
