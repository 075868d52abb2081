from __future__ import annotations

from ssage.stats import load_stats, record


def test_record_accumulates_runs_and_failures(tmp_path):
    path = tmp_path / "metrics.json"

    record("explain", 0.2, path=path)
    record("explain", 0.4, path=path)
    stat = record("explain", 0.0, "backend down", path=path)

    assert stat.runs == 3
    assert stat.failures == 1
    assert stat.total_time_ms == 600
    assert stat.avg_time_ms == 200
    assert stat.last_error == "backend down"
    assert stat.last_run is not None

    store = load_stats(path)
    assert store.root["explain"].runs == 3


def test_commands_are_tracked_separately(tmp_path):
    path = tmp_path / "metrics.json"
    record("tip", 0.1, path=path)
    record("analyze", 0.1, path=path)

    assert sorted(load_stats(path).root) == ["analyze", "tip"]


def test_corrupt_stats_file_starts_fresh(tmp_path):
    path = tmp_path / "metrics.json"
    path.write_text("not json", encoding="utf-8")

    assert load_stats(path).root == {}
    assert record("tip", 0.1, path=path).runs == 1


def test_unwritable_stats_file_does_not_raise(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")

    stat = record("tip", 0.1, path=blocker / "metrics.json")
    assert stat.runs == 1
