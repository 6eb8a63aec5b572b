"""Data classes for the hunter domain model."""
import json
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from hunter_system.ranks import Rank, coerce_rank


class Category(str, Enum):
    MIND = "mind"
    BODY = "body"
    DISCIPLINE = "discipline"
    LIFESTYLE = "lifestyle"
    WILLPOWER = "willpower"
    FOCUS = "focus"


CATEGORY_ORDER = list(Category)


@dataclass
class Quest:
    id: str
    title: str
    description: str
    category: Category
    xp_reward: int
    difficulty: str = "medium"
    completed: bool = False
    quest_date: Optional[date] = None
    completed_at: Optional[datetime] = None

    def complete(self, when: Optional[datetime] = None) -> int:
        """Mark the quest done. Returns the XP earned, 0 if it was already done."""
        if self.completed:
            return 0
        self.completed = True
        self.completed_at = when
        return self.xp_reward

    @classmethod
    def from_row(cls, row) -> "Quest":
        completed_at = row["completed_at"]
        return cls(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            category=Category(row["category"]),
            xp_reward=row["xp_reward"],
            difficulty=row["difficulty"],
            completed=bool(row["completed"]),
            quest_date=date.fromisoformat(row["quest_date"]),
            completed_at=datetime.fromisoformat(completed_at) if completed_at else None,
        )


@dataclass
class AssessmentAnswer:
    question_id: int
    score: int
    category: Category


@dataclass
class Hunter:
    id: str
    email: str = ""
    total_xp: int = 0
    current_rank: Rank = Rank.E
    streak_days: int = 0
    last_full_clear_on: Optional[str] = None
    rank_assigned_at: Optional[str] = None
    quests_completed: int = 0
    quests_completed_on: Optional[str] = None
    assessment_score: Optional[int] = None
    stats: dict = field(default_factory=dict)
    is_admin: bool = False
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Hunter":
        return cls(
            id=row["id"],
            email=row["email"] or "",
            total_xp=row["total_xp"],
            current_rank=coerce_rank(row["current_rank"]),
            streak_days=row["streak_days"],
            last_full_clear_on=row["last_full_clear_on"],
            rank_assigned_at=row["rank_assigned_at"],
            quests_completed=row["quests_completed"],
            quests_completed_on=row["quests_completed_on"],
            assessment_score=row["assessment_score"],
            stats=json.loads(row["stats"] or "{}"),
            is_admin=bool(row["is_admin"]),
            created_at=row["created_at"],
        )
