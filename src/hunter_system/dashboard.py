"""Dashboard values: rank colours, streak tiers, category stats."""
from hunter_system.db import get_connection
from hunter_system.models import CATEGORY_ORDER
from hunter_system.ranks import Rank, coerce_rank

# Completed quests in one category that fill its radar axis
STAT_QUESTS_FOR_MAX = 30

RANK_COLORS = {
    Rank.E: "grey62",
    Rank.D: "green",
    Rank.C: "blue",
    Rank.B: "purple",
    Rank.A: "dark_orange",
    Rank.S: "red",
    Rank.SS: "bold yellow",
}


def get_rank_color(rank) -> str:
    return RANK_COLORS[coerce_rank(rank)]


def get_streak_tier(streak_days: int) -> str:
    if streak_days >= 30:
        return "wildfire"
    elif streak_days >= 14:
        return "inferno"
    elif streak_days >= 7:
        return "blaze"
    return "ember"


def get_streak_color(streak_days: int) -> str:
    if streak_days >= 30:
        return "gold1"
    elif streak_days >= 14:
        return "deep_pink2"
    elif streak_days >= 7:
        return "purple"
    return "cyan"


def progress_bar(percentage: float, width: int = 20) -> str:
    filled = int(max(0.0, min(100.0, percentage)) / 100 * width)
    return "█" * filled + "░" * (width - filled)


def hunter_stats(db_path: str, hunter_id: str) -> dict:
    """Radar values per category from all completed quests, 0-100."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT category, COUNT(*) as done FROM quests
        WHERE hunter_id = ? AND completed = 1
        GROUP BY category""",
        (hunter_id,),
    ).fetchall()
    conn.close()
    counts = {r["category"]: r["done"] for r in rows}
    return {
        category.value: round(min(counts.get(category.value, 0) / STAT_QUESTS_FOR_MAX * 100, 100), 1)
        for category in CATEGORY_ORDER
    }


def get_quest_stats(db_path: str, hunter_id: str) -> dict:
    conn = get_connection(db_path)
    row = conn.execute(
        """SELECT COUNT(*) as total,
            SUM(CASE WHEN completed = 1 THEN 1 ELSE 0 END) as done,
            SUM(CASE WHEN completed = 1 THEN xp_reward ELSE 0 END) as xp
        FROM quests WHERE hunter_id = ?""",
        (hunter_id,),
    ).fetchone()
    days_active = conn.execute(
        "SELECT COUNT(DISTINCT quest_date) FROM quests WHERE hunter_id = ? AND completed = 1",
        (hunter_id,),
    ).fetchone()[0]
    full_clears = conn.execute(
        """SELECT COUNT(*) FROM (
            SELECT quest_date FROM quests WHERE hunter_id = ?
            GROUP BY quest_date HAVING MIN(completed) = 1
        )""",
        (hunter_id,),
    ).fetchone()[0]
    conn.close()
    return {
        "quests_assigned": row["total"],
        "quests_completed": row["done"] or 0,
        "quest_xp_earned": row["xp"] or 0,
        "days_active": days_active,
        "full_clear_days": full_clears,
    }
