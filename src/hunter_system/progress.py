"""Hunter progress: XP awards, daily quest batches, completion and streaks."""
import json
import logging
import sqlite3
from datetime import date, datetime, timezone
from typing import Optional

from hunter_system.assessment import assess
from hunter_system.config import Settings, get_settings
from hunter_system.db import get_connection
from hunter_system.models import CATEGORY_ORDER, AssessmentAnswer, Hunter, Quest
from hunter_system.quests import generate_daily_quests
from hunter_system.ranks import (
    DEFAULT_LADDER, RankLadder, coerce_rank, days_progress, is_max_rank,
    next_rank, rank_config, rank_from_xp, xp_progress,
)
from hunter_system.streaks import advance_streak, current_streak, streak_xp_boost

logger = logging.getLogger(__name__)


class HunterSystemError(Exception):
    """Base class for progress service errors."""


class HunterNotFound(HunterSystemError, LookupError):
    pass


class QuestNotFound(HunterSystemError, LookupError):
    pass


class AdminRequired(HunterSystemError, PermissionError):
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _fetch_hunter_row(conn: sqlite3.Connection, hunter_id: str) -> sqlite3.Row:
    row = conn.execute("SELECT * FROM hunters WHERE id = ?", (hunter_id,)).fetchone()
    if row is None:
        raise HunterNotFound(f"No hunter with id {hunter_id!r}")
    return row


def get_hunter(db_path: str, hunter_id: str) -> Hunter:
    conn = get_connection(db_path)
    try:
        row = _fetch_hunter_row(conn, hunter_id)
    finally:
        conn.close()
    return Hunter.from_row(row)


def get_or_create_hunter(
    db_path: str,
    hunter_id: str,
    email: str = "",
    as_of: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> Hunter:
    """Fetch a hunter, creating an E-rank record on first sight."""
    settings = settings or get_settings()
    as_of = as_of or _now()
    conn = get_connection(db_path)
    try:
        conn.execute(
            """INSERT OR IGNORE INTO hunters (id, email, current_rank, rank_assigned_at, is_admin, created_at)
            VALUES (?, ?, ?, ?, ?, ?)""",
            (
                hunter_id, email, DEFAULT_LADDER.lowest.id.value, as_of.isoformat(),
                int(settings.is_admin_email(email)), as_of.isoformat(),
            ),
        )
        conn.commit()
        row = _fetch_hunter_row(conn, hunter_id)
    finally:
        conn.close()
    return Hunter.from_row(row)


def _award_xp(
    conn: sqlite3.Connection,
    hunter_row: sqlite3.Row,
    amount: int,
    as_of: datetime,
    ladder: RankLadder,
) -> dict:
    amount = max(0, int(amount))
    rank_before = coerce_rank(hunter_row["current_rank"], ladder)
    total_xp = max(0, hunter_row["total_xp"]) + amount
    rank_after = rank_from_xp(total_xp, ladder)
    rank_changed = rank_after != rank_before
    rank_assigned_at = as_of.isoformat() if rank_changed else hunter_row["rank_assigned_at"]
    conn.execute(
        "UPDATE hunters SET total_xp = ?, current_rank = ?, rank_assigned_at = ? WHERE id = ?",
        (total_xp, rank_after.value, rank_assigned_at, hunter_row["id"]),
    )
    if rank_changed:
        logger.info(
            "Hunter %s moved from rank %s to %s at %d XP",
            hunter_row["id"], rank_before.value, rank_after.value, total_xp,
        )
    return {
        "xp_gained": amount,
        "total_xp": total_xp,
        "rank_before": rank_before,
        "rank_after": rank_after,
        "rank_changed": rank_changed,
    }


def award_xp(
    db_path: str,
    hunter_id: str,
    amount: int,
    as_of: Optional[datetime] = None,
    ladder: RankLadder = DEFAULT_LADDER,
) -> dict:
    """Add XP and re-derive the rank from the new total."""
    as_of = as_of or _now()
    conn = get_connection(db_path)
    try:
        hunter_row = _fetch_hunter_row(conn, hunter_id)
        result = _award_xp(conn, hunter_row, amount, as_of, ladder)
        conn.commit()
    finally:
        conn.close()
    return result


def record_assessment(
    db_path: str,
    hunter_id: str,
    answers: list[AssessmentAnswer],
    as_of: Optional[datetime] = None,
    ladder: RankLadder = DEFAULT_LADDER,
) -> dict:
    """Store questionnaire results and place the hunter at their starting rank.

    The hunter's XP is raised to the starting rank's threshold so the rank
    stays derivable from XP. Existing XP is never reduced.
    """
    as_of = as_of or _now()
    result = assess(answers)
    conn = get_connection(db_path)
    try:
        hunter_row = _fetch_hunter_row(conn, hunter_id)
        floor_xp = rank_config(result.rank, ladder).min_xp
        total_xp = max(hunter_row["total_xp"], floor_xp)
        rank = rank_from_xp(total_xp, ladder)
        rank_assigned_at = hunter_row["rank_assigned_at"]
        if rank.value != hunter_row["current_rank"] or not rank_assigned_at:
            rank_assigned_at = as_of.isoformat()
        conn.execute(
            """UPDATE hunters SET assessment_score = ?, stats = ?, total_xp = ?,
            current_rank = ?, rank_assigned_at = ? WHERE id = ?""",
            (result.total_score, json.dumps(result.stats), total_xp, rank.value, rank_assigned_at, hunter_id),
        )
        conn.commit()
    finally:
        conn.close()
    return {
        "total_score": result.total_score,
        "assessed_rank": result.rank,
        "rank": rank,
        "total_xp": total_xp,
        "stats": result.stats,
    }


def _fetch_quests(conn: sqlite3.Connection, hunter_id: str, quest_date: date) -> list[Quest]:
    rows = conn.execute(
        "SELECT * FROM quests WHERE hunter_id = ? AND quest_date = ?",
        (hunter_id, quest_date.isoformat()),
    ).fetchall()
    quests = [Quest.from_row(r) for r in rows]
    quests.sort(key=lambda q: CATEGORY_ORDER.index(q.category))
    return quests


def get_quests_for_date(db_path: str, hunter_id: str, quest_date: date) -> list[Quest]:
    conn = get_connection(db_path)
    try:
        return _fetch_quests(conn, hunter_id, quest_date)
    finally:
        conn.close()


def get_todays_quests(db_path: str, hunter_id: str, as_of: Optional[datetime] = None) -> list[Quest]:
    """Return today's batch, creating it at the hunter's current rank if needed.

    Creation may race with another request for the same hunter and day. The
    unique (hunter, date, category) constraint lets the first insert win; the
    loser rolls back and returns the stored batch.
    """
    as_of = as_of or _now()
    today = as_of.date()
    conn = get_connection(db_path)
    try:
        hunter_row = _fetch_hunter_row(conn, hunter_id)
        existing = _fetch_quests(conn, hunter_id, today)
        if existing:
            return existing

        batch = generate_daily_quests(hunter_row["current_rank"], quest_date=today)
        try:
            conn.executemany(
                """INSERT INTO quests
                (id, hunter_id, quest_date, category, title, description, xp_reward, difficulty, completed, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0, ?)""",
                [
                    (q.id, hunter_id, today.isoformat(), q.category.value, q.title, q.description,
                     q.xp_reward, q.difficulty, as_of.isoformat())
                    for q in batch
                ],
            )
            conn.commit()
        except sqlite3.IntegrityError:
            conn.rollback()
            logger.warning(
                "Quest batch for hunter %s on %s was created concurrently; using the stored batch",
                hunter_id, today.isoformat(),
            )
            return _fetch_quests(conn, hunter_id, today)

        logger.info(
            "Generated %d %s-rank quests for hunter %s on %s",
            len(batch), hunter_row["current_rank"], hunter_id, today.isoformat(),
        )
        return batch
    finally:
        conn.close()


def complete_quest(
    db_path: str,
    hunter_id: str,
    quest_id: str,
    as_of: Optional[datetime] = None,
    ladder: RankLadder = DEFAULT_LADDER,
) -> dict:
    """Complete a quest once, award its XP and update the daily counter and streak."""
    as_of = as_of or _now()
    today = as_of.date().isoformat()
    conn = get_connection(db_path)
    try:
        quest_row = conn.execute(
            "SELECT * FROM quests WHERE id = ? AND hunter_id = ?", (quest_id, hunter_id)
        ).fetchone()
        if quest_row is None:
            raise QuestNotFound(f"No quest {quest_id!r} for hunter {hunter_id!r}")

        cursor = conn.execute(
            "UPDATE quests SET completed = 1, completed_at = ? WHERE id = ? AND completed = 0",
            (as_of.isoformat(), quest_id),
        )
        hunter_row = _fetch_hunter_row(conn, hunter_id)
        remaining = conn.execute(
            "SELECT COUNT(*) FROM quests WHERE hunter_id = ? AND quest_date = ? AND completed = 0",
            (hunter_id, quest_row["quest_date"]),
        ).fetchone()[0]
        all_completed = remaining == 0

        if cursor.rowcount == 0:
            # Already completed earlier; completion is never repeated or undone.
            conn.rollback()
            return {
                "newly_completed": False,
                "xp_gained": 0,
                "total_xp": hunter_row["total_xp"],
                "rank": coerce_rank(hunter_row["current_rank"], ladder),
                "rank_changed": False,
                "all_completed": all_completed,
                "streak_days": hunter_row["streak_days"],
            }

        award = _award_xp(conn, hunter_row, quest_row["xp_reward"], as_of, ladder)

        if hunter_row["quests_completed_on"] == today:
            quests_completed = hunter_row["quests_completed"] + 1
        else:
            quests_completed = 1

        streak_days = hunter_row["streak_days"]
        last_full_clear_on = hunter_row["last_full_clear_on"]
        # A late clear of a day older than the last full clear leaves the streak alone
        if all_completed and not (last_full_clear_on and quest_row["quest_date"] < last_full_clear_on):
            streak_days = advance_streak(streak_days, last_full_clear_on, quest_row["quest_date"])
            last_full_clear_on = quest_row["quest_date"]
            logger.info("Hunter %s cleared every quest for %s, streak %d", hunter_id, last_full_clear_on, streak_days)

        conn.execute(
            """UPDATE hunters SET quests_completed = ?, quests_completed_on = ?,
            streak_days = ?, last_full_clear_on = ? WHERE id = ?""",
            (quests_completed, today, streak_days, last_full_clear_on, hunter_id),
        )
        conn.commit()
    finally:
        conn.close()

    return {
        "newly_completed": True,
        "xp_gained": award["xp_gained"],
        "total_xp": award["total_xp"],
        "rank": award["rank_after"],
        "rank_changed": award["rank_changed"],
        "all_completed": all_completed,
        "streak_days": streak_days,
    }


def get_progress_summary(
    db_path: str,
    hunter_id: str,
    as_of: Optional[datetime] = None,
    ladder: RankLadder = DEFAULT_LADDER,
) -> dict:
    """Everything a progress view needs, derived from the stored hunter."""
    as_of = as_of or _now()
    hunter = get_hunter(db_path, hunter_id)
    rank = coerce_rank(hunter.current_rank, ladder)
    config = rank_config(rank, ladder)
    streak = current_streak(hunter.streak_days, hunter.last_full_clear_on, as_of)
    quests_done_today = hunter.quests_completed if hunter.quests_completed_on == as_of.date().isoformat() else 0
    return {
        "hunter_id": hunter.id,
        "total_xp": hunter.total_xp,
        "current_rank": rank,
        "rank_name": config.display_name,
        "rank_description": config.description,
        "xp_progress": xp_progress(hunter.total_xp, rank, ladder),
        "days_progress": days_progress(
            hunter.rank_assigned_at or hunter.created_at, streak, rank, as_of, ladder
        ),
        "next_rank": next_rank(rank, ladder),
        "is_max_rank": is_max_rank(rank, ladder),
        "streak_days": streak,
        "streak_boost": streak_xp_boost(streak),
        "quests_done_today": quests_done_today,
        "stats": hunter.stats,
    }


def reset_progress(
    db_path: str,
    actor_id: str,
    target_id: str,
    as_of: Optional[datetime] = None,
    ladder: RankLadder = DEFAULT_LADDER,
) -> None:
    """Put a hunter back to the lowest rank with no XP, streak or quests.

    Only hunters holding the admin capability may do this.
    """
    as_of = as_of or _now()
    conn = get_connection(db_path)
    try:
        actor = _fetch_hunter_row(conn, actor_id)
        if not actor["is_admin"]:
            raise AdminRequired(f"Hunter {actor_id!r} may not reset progress")
        _fetch_hunter_row(conn, target_id)
        conn.execute("DELETE FROM quests WHERE hunter_id = ?", (target_id,))
        conn.execute(
            """UPDATE hunters SET total_xp = 0, current_rank = ?, rank_assigned_at = ?,
            streak_days = 0, last_full_clear_on = NULL, quests_completed = 0,
            quests_completed_on = NULL WHERE id = ?""",
            (ladder.lowest.id.value, as_of.isoformat(), target_id),
        )
        conn.commit()
    finally:
        conn.close()
    logger.warning("Admin %s reset progress for hunter %s", actor_id, target_id)
