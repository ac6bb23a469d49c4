"""LeetCode data models returned by the GraphQL client."""

from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field

ACCEPTED_STATUS = "Accepted"


class Difficulty(str, Enum):
    """Problem difficulty levels."""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"
    UNKNOWN = "Unknown"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "Difficulty":
        """Parse a LeetCode difficulty label, falling back to UNKNOWN."""
        if not label:
            return cls.UNKNOWN
        for member in cls:
            if member.value.lower() == str(label).strip().lower():
                return member
        return cls.UNKNOWN


class Submission(BaseModel):
    """One entry of a user's recent submission list."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    slug: str = Field(alias="titleSlug")
    timestamp: int  # Unix seconds; LeetCode sends it as a string
    status: str = Field(alias="statusDisplay")
    lang: str = ""

    @property
    def is_accepted(self) -> bool:
        return self.status == ACCEPTED_STATUS

    @property
    def url(self) -> str:
        return f"https://leetcode.com/problems/{self.slug}/"


class ProfileStats(BaseModel):
    """Accepted problem counts by difficulty."""
    easy: int = 0
    medium: int = 0
    hard: int = 0
    total: int = 0


class LeetCodeProfile(BaseModel):
    """Public LeetCode profile with aggregate stats."""
    username: str
    real_name: Optional[str] = None
    ranking: Optional[int] = None
    avatar_url: Optional[str] = None
    streak: int = 0
    stats: ProfileStats = Field(default_factory=ProfileStats)

    @property
    def profile_url(self) -> str:
        return f"https://leetcode.com/{self.username}"


class DailyProblem(BaseModel):
    """Today's LeetCode daily challenge."""
    date: str
    link: str
    title: str
    slug: str
    difficulty: Difficulty = Difficulty.UNKNOWN
    tags: List[str] = Field(default_factory=list)
    acceptance_rate: float = 0.0
