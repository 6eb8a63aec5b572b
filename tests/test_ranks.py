"""Tests for the rank ladder and progression math."""
from datetime import date, datetime, timedelta, timezone

import pytest

from hunter_system.ranks import (
    DEFAULT_LADDER, LadderConfigError, Rank, RankConfig, RankLadder,
    coerce_rank, days_elapsed, days_progress, is_max_rank, next_rank,
    rank_config, rank_from_assessment_score, rank_from_xp, xp_progress,
)

AS_OF = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_rank_from_xp_zero_is_lowest():
    assert rank_from_xp(0) == Rank.E


def test_rank_from_xp_negative_clamps_to_lowest():
    assert rank_from_xp(-500) == Rank.E


def test_rank_from_xp_boundaries_exact():
    for config in DEFAULT_LADDER:
        assert rank_from_xp(config.min_xp) == config.id


def test_rank_from_xp_just_below_threshold():
    for lower, higher in zip(DEFAULT_LADDER.configs, DEFAULT_LADDER.configs[1:]):
        assert rank_from_xp(higher.min_xp - 1) == lower.id


def test_rank_from_xp_monotonic():
    order = [c.id for c in DEFAULT_LADDER]
    previous = 0
    for xp in range(0, 15000, 37):
        index = order.index(rank_from_xp(xp))
        assert index >= previous
        previous = index


def test_rank_from_xp_far_beyond_terminal():
    assert rank_from_xp(999999) == Rank.SS


def test_rank_from_assessment_score_ceiling():
    assert rank_from_assessment_score(150) == Rank.D
    assert rank_from_assessment_score(10_000) == Rank.D


def test_rank_from_assessment_score_low():
    assert rank_from_assessment_score(0) == Rank.E
    assert rank_from_assessment_score(149) == Rank.E
    assert rank_from_assessment_score(-20) == Rank.E


def test_rank_from_assessment_score_monotonic():
    order = [c.id for c in DEFAULT_LADDER]
    ranks = [order.index(rank_from_assessment_score(s)) for s in range(0, 200)]
    assert ranks == sorted(ranks)


def test_next_rank_chain_reaches_terminal():
    rank = Rank.E
    steps = 0
    while next_rank(rank) is not None:
        rank = next_rank(rank)
        steps += 1
    assert rank == Rank.SS
    assert steps == len(DEFAULT_LADDER) - 1


def test_next_rank_terminal_is_none():
    assert next_rank(Rank.SS) is None
    assert is_max_rank(Rank.SS)
    assert not is_max_rank(Rank.S)


def test_next_rank_immediate_successor():
    assert next_rank(Rank.E) == Rank.D
    assert next_rank("B") == Rank.A


def test_coerce_rank_accepts_strings_and_defaults():
    assert coerce_rank("ss") == Rank.SS
    assert coerce_rank(" a ") == Rank.A
    assert coerce_rank("Z") == Rank.E
    assert coerce_rank(None) == Rank.E


def test_rank_config_lookup():
    config = rank_config("C")
    assert config.min_xp == 750
    assert config.display_name == "C-Rank Hunter"


def test_xp_progress_at_zero():
    progress = xp_progress(0, Rank.E)
    assert progress.current == 0
    assert progress.max == 300
    assert progress.percentage == 0
    assert progress.xp_needed_for_next == 300


def test_xp_progress_at_rank_threshold():
    progress = xp_progress(300, rank_from_xp(300))
    assert progress.xp_in_current_rank == 0
    assert progress.xp_needed_for_next == 450


def test_xp_progress_mid_rank():
    progress = xp_progress(449, rank_from_xp(449))
    assert rank_from_xp(449) == Rank.D
    assert progress.xp_in_current_rank == 149
    assert 0 < progress.percentage < 100
    assert progress.percentage == pytest.approx(149 / 450 * 100)


def test_xp_progress_terminal_always_full():
    for xp in (12000, 50000, 999999):
        progress = xp_progress(xp, Rank.SS)
        assert progress.percentage == 100
        assert progress.xp_needed_for_next == 0


def test_xp_progress_clamps_above_next_threshold():
    # Stored rank lagging behind XP still yields a sane bar.
    progress = xp_progress(5000, Rank.E)
    assert progress.percentage == 100


def test_xp_progress_negative_xp():
    progress = xp_progress(-10, Rank.E)
    assert progress.xp_in_current_rank == 0
    assert progress.percentage == 0


def test_days_progress_uses_elapsed_days():
    assigned = AS_OF - timedelta(days=3, hours=2)
    progress = days_progress(assigned, 0, Rank.E, AS_OF)
    assert progress.days_completed == 3
    assert progress.days_required == 7
    assert progress.days_remaining == 4


def test_days_progress_streak_can_only_help():
    assigned = AS_OF - timedelta(days=2)
    progress = days_progress(assigned, 5, Rank.E, AS_OF)
    assert progress.days_completed == 5


def test_days_progress_clamped_to_requirement():
    assigned = AS_OF - timedelta(days=400)
    progress = days_progress(assigned, 400, Rank.D, AS_OF)
    assert progress.days_completed == 30
    assert progress.percentage == 100
    assert progress.days_remaining == 0


def test_days_progress_terminal_rank():
    progress = days_progress(AS_OF, 12, Rank.SS, AS_OF)
    assert progress.days_required == 0
    assert progress.percentage == 100
    assert progress.days_remaining == 0


def test_days_progress_missing_timestamp_uses_streak():
    progress = days_progress(None, 2, Rank.E, AS_OF)
    assert progress.days_completed == 2


def test_days_progress_future_timestamp():
    progress = days_progress(AS_OF + timedelta(days=5), 0, Rank.E, AS_OF)
    assert progress.days_completed == 0


def test_days_elapsed_accepts_iso_strings_and_dates():
    assert days_elapsed("2025-03-01T12:00:00Z", AS_OF) == 9
    assert days_elapsed(date(2025, 3, 8), date(2025, 3, 10)) == 2
    assert days_elapsed("not a date", AS_OF) == 0


def test_ladder_rejects_non_increasing_thresholds():
    with pytest.raises(LadderConfigError):
        RankLadder([
            RankConfig(Rank.E, "E", 0, 100, 7),
            RankConfig(Rank.D, "D", 0, 0, 0),
        ])


def test_ladder_rejects_nonzero_floor():
    with pytest.raises(LadderConfigError):
        RankLadder([
            RankConfig(Rank.E, "E", 10, 100, 7),
            RankConfig(Rank.D, "D", 110, 0, 0),
        ])


def test_ladder_rejects_terminal_with_requirements():
    with pytest.raises(LadderConfigError):
        RankLadder([
            RankConfig(Rank.E, "E", 0, 100, 7),
            RankConfig(Rank.D, "D", 100, 50, 10),
        ])


def test_ladder_rejects_duplicates_and_empty():
    with pytest.raises(LadderConfigError):
        RankLadder([])
    with pytest.raises(LadderConfigError):
        RankLadder([
            RankConfig(Rank.E, "E", 0, 100, 7),
            RankConfig(Rank.E, "E again", 100, 0, 0),
        ])


def _short_configs():
    return [
        RankConfig(Rank.E, "E", 0, 100, 3),
        RankConfig(Rank.D, "D", 100, 100, 3),
        RankConfig(Rank.C, "C", 200, 100, 3),
        RankConfig(Rank.B, "B", 300, 100, 3),
        RankConfig(Rank.A, "A", 400, 100, 3),
        RankConfig(Rank.S, "S", 500, 100, 3),
        RankConfig(Rank.SS, "SS", 600, 0, 0),
    ]


def test_ladder_rejects_reordered_ranks():
    configs = _short_configs()
    configs[0], configs[-1] = (
        RankConfig(Rank.SS, "SS", 0, 100, 3),
        RankConfig(Rank.E, "E", 600, 0, 0),
    )
    with pytest.raises(LadderConfigError):
        RankLadder(configs)


def test_ladder_rejects_missing_ranks():
    with pytest.raises(LadderConfigError):
        RankLadder([
            RankConfig(Rank.E, "E", 0, 100, 7),
            RankConfig(Rank.D, "D", 100, 0, 0),
        ])
    # Missing terminal rank
    configs = _short_configs()[:-1]
    configs[-1] = RankConfig(Rank.S, "S", 500, 0, 0)
    with pytest.raises(LadderConfigError):
        RankLadder(configs)


def test_ladder_with_every_rank_accepted():
    ladder = RankLadder(_short_configs())
    assert ladder.lowest.id == Rank.E
    assert ladder.terminal.id == Rank.SS


def test_ladder_from_yaml_file(tmp_path):
    f = tmp_path / "ladder.yaml"
    rows = "".join(
        f"  - {{id: {c.id.value}, min_xp: {c.min_xp}, xp_to_next: {c.xp_to_next}, "
        f"days_to_next: {c.days_to_next}}}\n"
        for c in _short_configs()
    )
    f.write_text("ranks:\n" + rows)
    ladder = RankLadder.from_file(str(f))
    assert len(ladder) == 7
    assert rank_from_xp(0, ladder) == Rank.E
    assert rank_from_xp(150, ladder) == Rank.D
    assert rank_from_xp(600, ladder) == Rank.SS
    assert next_rank(Rank.S, ladder) == Rank.SS
    assert next_rank(Rank.SS, ladder) is None
    assert coerce_rank("bogus", ladder) == Rank.E


def test_ladder_from_json_file_validates(tmp_path):
    f = tmp_path / "ladder.json"
    f.write_text('{"ranks": [{"id": "E", "min_xp": 5}]}')
    with pytest.raises(LadderConfigError):
        RankLadder.from_file(str(f))


def test_ladder_from_unsupported_file(tmp_path):
    f = tmp_path / "ladder.txt"
    f.write_text("E 0")
    with pytest.raises(LadderConfigError):
        RankLadder.from_file(str(f))
