"""Rank ladder and XP progression rules."""
import json
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from enum import Enum
from pathlib import Path
from typing import NamedTuple, Optional, Union

SECONDS_PER_DAY = 60 * 60 * 24


class Rank(str, Enum):
    """Hunter ranks, lowest to highest."""
    E = "E"
    D = "D"
    C = "C"
    B = "B"
    A = "A"
    S = "S"
    SS = "SS"


class LadderConfigError(ValueError):
    """Raised when a rank ladder breaks its ordering rules."""


@dataclass(frozen=True)
class RankConfig:
    id: Rank
    display_name: str
    min_xp: int
    xp_to_next: int
    days_to_next: int
    description: str = ""


class XPProgress(NamedTuple):
    current: int
    max: int
    percentage: float
    xp_in_current_rank: int
    xp_needed_for_next: int


class DaysProgress(NamedTuple):
    days_completed: int
    days_required: int
    percentage: float
    days_remaining: int


class RankLadder:
    """Ordered, validated sequence of rank configs.

    Validation happens once, here, so lookups never have to defend against
    a broken table.
    """

    def __init__(self, configs):
        self.configs = tuple(configs)
        self._validate()
        self._by_rank = {c.id: c for c in self.configs}
        self._index = {c.id: i for i, c in enumerate(self.configs)}

    def _validate(self) -> None:
        if not self.configs:
            raise LadderConfigError("rank ladder is empty")
        seen = set()
        for config in self.configs:
            if config.id in seen:
                raise LadderConfigError(f"rank {config.id.value} appears twice")
            seen.add(config.id)
        if self.configs[0].min_xp != 0:
            raise LadderConfigError("lowest rank must start at 0 XP")
        for lower, higher in zip(self.configs, self.configs[1:]):
            if higher.min_xp <= lower.min_xp:
                raise LadderConfigError(
                    f"min_xp must strictly increase: {lower.id.value}={lower.min_xp}, "
                    f"{higher.id.value}={higher.min_xp}"
                )
            if lower.days_to_next <= 0:
                raise LadderConfigError(f"rank {lower.id.value} needs days_to_next > 0")
        terminal = self.configs[-1]
        if terminal.xp_to_next != 0 or terminal.days_to_next != 0:
            raise LadderConfigError(
                f"terminal rank {terminal.id.value} must have no next-rank requirements"
            )
        ids = [c.id for c in self.configs]
        if ids != list(Rank):
            raise LadderConfigError(
                f"ladder must list every rank from {Rank.E.value} to {Rank.SS.value} in order, "
                f"got {', '.join(r.value for r in ids)}"
            )

    def __len__(self) -> int:
        return len(self.configs)

    def __iter__(self):
        return iter(self.configs)

    def __contains__(self, rank) -> bool:
        return rank in self._by_rank

    @property
    def lowest(self) -> RankConfig:
        return self.configs[0]

    @property
    def terminal(self) -> RankConfig:
        return self.configs[-1]

    def get(self, rank: Rank) -> RankConfig:
        return self._by_rank[rank]

    def successor(self, rank: Rank) -> Optional[RankConfig]:
        index = self._index.get(rank)
        if index is None or index == len(self.configs) - 1:
            return None
        return self.configs[index + 1]

    @classmethod
    def from_dicts(cls, rows: list[dict]) -> "RankLadder":
        configs = []
        for row in rows:
            try:
                configs.append(RankConfig(
                    id=Rank(row["id"]),
                    display_name=row.get("display_name", f"{row['id']}-Rank Hunter"),
                    min_xp=int(row["min_xp"]),
                    xp_to_next=int(row.get("xp_to_next", 0)),
                    days_to_next=int(row.get("days_to_next", 0)),
                    description=row.get("description", ""),
                ))
            except (KeyError, ValueError, TypeError) as e:
                raise LadderConfigError(f"invalid rank entry {row!r}: {e}") from e
        return cls(configs)

    @classmethod
    def from_file(cls, file_path: str) -> "RankLadder":
        """Load a ladder from a .json, .yaml or .yml file with a top-level `ranks` list."""
        path = Path(file_path)
        suffix = path.suffix.lower()
        if suffix == ".json":
            data = json.loads(path.read_text())
        elif suffix in (".yaml", ".yml"):
            import yaml
            data = yaml.safe_load(path.read_text())
        else:
            raise LadderConfigError(f"unsupported ladder file type: {suffix or path.name}")
        if not isinstance(data, dict) or not isinstance(data.get("ranks"), list):
            raise LadderConfigError(f"{path.name} must contain a 'ranks' list")
        return cls.from_dicts(data["ranks"])


DEFAULT_LADDER = RankLadder([
    RankConfig(Rank.E, "E-Rank Hunter", 0, 300, 7,
               "E Rank Adventurer - Your journey begins here. Every legend started as a novice."),
    RankConfig(Rank.D, "D-Rank Hunter", 300, 450, 30,
               "D Rank Adventurer - You show potential. Keep training to unlock your true power."),
    RankConfig(Rank.C, "C-Rank Hunter", 750, 750, 45,
               "C Rank Adventurer - Solid foundation established. Ready for greater challenges."),
    RankConfig(Rank.B, "B-Rank Hunter", 1500, 1500, 60,
               "B Rank Hunter - Advanced skills developed. You stand above most adventurers."),
    RankConfig(Rank.A, "A-Rank Hunter", 3000, 3000, 90,
               "A Rank Hunter - Elite status achieved. Your dedication inspires others."),
    RankConfig(Rank.S, "S-Rank Hunter", 6000, 6000, 120,
               "S Rank Hunter - Master level reached. Few can match your discipline."),
    RankConfig(Rank.SS, "SS-Rank Hunter", 12000, 0, 0,
               "SS Rank Hunter - Transcendent being. You have surpassed human limitations."),
])

# Assessment alone never places a hunter above this rank.
ASSESSMENT_CEILING = Rank.D

# (minimum total score, rank), highest band first
ASSESSMENT_BANDS = [
    (150, Rank.D),
    (0, Rank.E),
]


def coerce_rank(value, ladder: RankLadder = DEFAULT_LADDER) -> Rank:
    """Turn a Rank or rank string into a Rank on the ladder, defaulting to the lowest."""
    try:
        rank = Rank(value.strip().upper() if isinstance(value, str) else value)
    except ValueError:
        return ladder.lowest.id
    return rank if rank in ladder else ladder.lowest.id


def rank_config(rank, ladder: RankLadder = DEFAULT_LADDER) -> RankConfig:
    return ladder.get(coerce_rank(rank, ladder))


def next_rank(current_rank, ladder: RankLadder = DEFAULT_LADDER) -> Optional[Rank]:
    successor = ladder.successor(coerce_rank(current_rank, ladder))
    return successor.id if successor else None


def is_max_rank(rank, ladder: RankLadder = DEFAULT_LADDER) -> bool:
    return next_rank(rank, ladder) is None


def rank_from_xp(total_xp: int, ladder: RankLadder = DEFAULT_LADDER) -> Rank:
    """Highest rank whose threshold the XP total has reached."""
    total_xp = max(0, int(total_xp))
    for config in reversed(ladder.configs):
        if total_xp >= config.min_xp:
            return config.id
    return ladder.lowest.id


def rank_from_assessment_score(total_score: int) -> Rank:
    """Starting rank from the onboarding questionnaire total."""
    total_score = max(0, int(total_score))
    for min_score, rank in ASSESSMENT_BANDS:
        if total_score >= min_score:
            return rank
    return Rank.E


def xp_progress(current_xp: int, current_rank, ladder: RankLadder = DEFAULT_LADDER) -> XPProgress:
    """XP progress from the current rank's threshold towards the next one."""
    current_xp = max(0, int(current_xp))
    config = rank_config(current_rank, ladder)
    successor = ladder.successor(config.id)
    xp_in_rank = max(0, current_xp - config.min_xp)

    if successor is None:
        return XPProgress(
            current=current_xp,
            max=current_xp,
            percentage=100.0,
            xp_in_current_rank=xp_in_rank,
            xp_needed_for_next=0,
        )

    xp_needed = successor.min_xp - config.min_xp
    if xp_needed <= 0:
        percentage = 100.0
    else:
        percentage = min(100.0, max(0.0, xp_in_rank / xp_needed * 100))
    return XPProgress(
        current=config.min_xp + xp_in_rank,
        max=successor.min_xp,
        percentage=percentage,
        xp_in_current_rank=xp_in_rank,
        xp_needed_for_next=xp_needed,
    )


def _as_datetime(value: Union[datetime, date, str]) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    elif not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def days_elapsed(since, as_of) -> int:
    """Whole days between two timestamps; 0 when `since` is missing or in the future."""
    if since is None:
        return 0
    try:
        delta = _as_datetime(as_of) - _as_datetime(since)
    except ValueError:
        return 0
    return max(0, int(delta.total_seconds() // SECONDS_PER_DAY))


def days_progress(
    rank_assigned_at,
    streak_days: int,
    current_rank,
    as_of,
    ladder: RankLadder = DEFAULT_LADDER,
) -> DaysProgress:
    """Days spent towards the next rank.

    Elapsed time since the rank was assigned and the hunter's streak are both
    capped at the requirement; the larger of the two counts.
    """
    streak_days = max(0, int(streak_days))
    config = rank_config(current_rank, ladder)
    days_required = config.days_to_next

    if days_required == 0:
        return DaysProgress(
            days_completed=streak_days,
            days_required=0,
            percentage=100.0,
            days_remaining=0,
        )

    elapsed = min(days_required, days_elapsed(rank_assigned_at, as_of))
    days_completed = max(elapsed, min(days_required, streak_days))
    percentage = min(100.0, max(0.0, days_completed / days_required * 100))
    return DaysProgress(
        days_completed=days_completed,
        days_required=days_required,
        percentage=percentage,
        days_remaining=max(0, days_required - days_completed),
    )
