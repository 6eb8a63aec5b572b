"""Daily quest templates and batch generation."""
import uuid
from datetime import date
from typing import Optional

from hunter_system.models import CATEGORY_ORDER, Category, Quest
from hunter_system.ranks import DEFAULT_LADDER, Rank, coerce_rank

# rank -> category -> (title, description, xp reward)
QUEST_TEMPLATES = {
    Rank.E: {
        Category.MIND: ("Focus Training", "1 hour of focused work/study (no phone)", 10),
        Category.BODY: ("Basic Physical Training", "50 pushups, 50 squats, 1 km run", 10),
        Category.DISCIPLINE: ("Discipline Challenge", "No junk food for the entire day", 8),
        Category.LIFESTYLE: ("Social Connection", "Have a meaningful conversation with someone", 8),
        Category.WILLPOWER: ("Mindfulness Practice", "10 minutes of meditation or reflection", 8),
        Category.FOCUS: ("Skill Development", "Practice a skill for 30 minutes", 8),
    },
    Rank.D: {
        Category.MIND: ("Extended Focus", "2 hours of focused work/study", 15),
        Category.BODY: ("Trainee Workout", "100 pushups, 100 squats, 2 km run", 15),
        Category.DISCIPLINE: ("Digital Discipline", "No junk food + limit social media to <2 hours", 12),
        Category.LIFESTYLE: ("Network Building", "Reach out to 3 people in your network", 12),
        Category.WILLPOWER: ("Gratitude Practice", "15 minutes meditation + write 3 gratitudes", 12),
        Category.FOCUS: ("Skill Advancement", "Practice a skill for 45 minutes", 12),
    },
    Rank.C: {
        Category.MIND: ("Deep Work Session", "3 hours of focused work/study", 20),
        Category.BODY: ("Intermediate Training", "150 pushups, 150 squats, 3 km run", 20),
        Category.DISCIPLINE: ("Evening Reflection", "Journal at night + no social media scrolling", 18),
        Category.LIFESTYLE: ("Leadership Practice", "Help or mentor someone today", 18),
        Category.WILLPOWER: ("Inner Work", "20 minutes meditation + journal reflection", 18),
        Category.FOCUS: ("Skill Mastery", "Practice a skill for 1 hour with focus", 18),
    },
    Rank.B: {
        Category.MIND: ("Advanced Focus", "4 hours of focused work/study", 25),
        Category.BODY: ("Advanced Workout", "200 pushups, 200 squats, 4 km run", 25),
        Category.DISCIPLINE: ("Complete Discipline", "No adult content + no junk food + daily reflection", 22),
        Category.LIFESTYLE: ("Community Impact", "Contribute to your community or help 3+ people", 22),
        Category.WILLPOWER: ("Spiritual Discipline", "30 minutes meditation + spiritual reading", 22),
        Category.FOCUS: ("Expert Practice", "Practice a skill for 1.5 hours with intensity", 22),
    },
    Rank.A: {
        Category.MIND: ("Elite Focus", "5 hours of focused work/study", 30),
        Category.BODY: ("Elite Training", "300 pushups, 300 squats, 5 km run", 30),
        Category.DISCIPLINE: ("Cold Discipline", "Cold shower + strict no distractions", 28),
        Category.LIFESTYLE: ("Social Leadership", "Lead a group activity or inspire 5+ people", 28),
        Category.WILLPOWER: ("Advanced Spirituality", "45 minutes meditation + teach someone", 28),
        Category.FOCUS: ("Mastery Training", "Practice a skill for 2 hours with perfect focus", 28),
    },
    Rank.S: {
        Category.MIND: ("Master Focus", "6 hours of focused work/study", 35),
        Category.BODY: ("Master Training", "400 pushups, 400 squats, 6 km run", 35),
        Category.DISCIPLINE: ("Master Discipline", "Mentor/teach someone + no indulgence in bad habits", 32),
        Category.LIFESTYLE: ("Master Influence", "Create positive impact for 10+ people", 32),
        Category.WILLPOWER: ("Master Spirituality", "1 hour meditation + guide others spiritually", 32),
        Category.FOCUS: ("Master Craft", "Practice a skill for 3 hours + teach someone", 32),
    },
    Rank.SS: {
        Category.MIND: ("Transcendent Focus", "8 hours of focused work/study", 40),
        Category.BODY: ("Transcendent Training", "500 pushups, 500 squats, 8 km run", 40),
        Category.DISCIPLINE: ("Absolute Detox", "Complete detox: no social media, adult content, junk food", 38),
        Category.LIFESTYLE: ("Transcendent Leadership", "Create massive positive impact for 20+ people", 38),
        Category.WILLPOWER: ("Transcendent Being", "2 hours meditation + spiritual mastery practice", 38),
        Category.FOCUS: ("Transcendent Mastery", "Practice a skill for 4+ hours + innovate/create", 38),
    },
}

DIFFICULTY_BY_RANK = {
    Rank.E: "easy",
    Rank.D: "easy",
    Rank.C: "medium",
    Rank.B: "medium",
    Rank.A: "hard",
    Rank.S: "hard",
    Rank.SS: "hard",
}


def validate_templates(templates: dict = QUEST_TEMPLATES) -> None:
    """Every ladder rank needs every category, with rewards that never shrink going up."""
    previous = None
    for config in DEFAULT_LADDER:
        by_category = templates.get(config.id)
        if by_category is None or set(by_category) != set(CATEGORY_ORDER):
            raise ValueError(f"quest templates for rank {config.id.value} must cover every category")
        for category in CATEGORY_ORDER:
            xp = by_category[category][2]
            if xp <= 0:
                raise ValueError(f"{config.id.value}/{category.value} reward must be positive")
            if previous is not None and xp < previous[category][2]:
                raise ValueError(f"{config.id.value}/{category.value} reward drops below the rank beneath it")
        previous = by_category


validate_templates()


def difficulty_for_rank(rank) -> str:
    return DIFFICULTY_BY_RANK[coerce_rank(rank)]


def generate_daily_quests(rank, quest_date: Optional[date] = None) -> list[Quest]:
    """Fresh batch of one quest per category for the given rank.

    Content is fixed per rank; ids are new on every call, so no completion
    state can leak from an earlier batch.
    """
    rank = coerce_rank(rank)
    templates = QUEST_TEMPLATES[rank]
    difficulty = DIFFICULTY_BY_RANK[rank]
    quests = []
    for category in CATEGORY_ORDER:
        title, description, xp = templates[category]
        quests.append(Quest(
            id=f"{rank.value}-{category.value}-{uuid.uuid4().hex}",
            title=title,
            description=description,
            category=category,
            xp_reward=xp,
            difficulty=difficulty,
            completed=False,
            quest_date=quest_date,
        ))
    return quests


def completed_xp(quests: list[Quest]) -> int:
    return sum(q.xp_reward for q in quests if q.completed)


def all_completed(quests: list[Quest]) -> bool:
    return bool(quests) and all(q.completed for q in quests)
