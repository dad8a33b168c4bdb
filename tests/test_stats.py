"""RelayStats summaries."""

from excel_relay.stats import RelayStats


def test_empty_summary():
    summary = RelayStats().get_summary()

    assert summary["total_calls"] == 0
    assert summary["failure_rate"] == 0.0
    assert summary["recent_errors"] == []


def test_mixed_calls():
    stats = RelayStats()
    stats.record_success("text-model", 100, 200)
    stats.record_success("vision-model", 300, 200)
    stats.record_failure("text-model", 50, "rate limited", status_code=429)

    summary = stats.get_summary()

    assert summary["total_calls"] == 3
    assert summary["total_failures"] == 1
    assert summary["failure_rate"] == 33.33
    assert summary["min_latency_ms"] == 50
    assert summary["max_latency_ms"] == 300
    assert summary["calls_by_model"] == {"text-model": 2, "vision-model": 1}
    assert summary["recent_errors"][0]["status_code"] == 429


def test_recent_errors_capped_and_newest_first():
    stats = RelayStats()
    for i in range(8):
        stats.record_failure("m", i, f"error {i}")

    errors = stats.get_summary()["recent_errors"]

    assert len(errors) == 5
    assert errors[0]["error"] == "error 7"


def test_history_bounded():
    stats = RelayStats(max_history=3)
    for i in range(10):
        stats.record_success("m", i, 200)

    summary = stats.get_summary()

    assert summary["total_calls"] == 10
    assert summary["min_latency_ms"] == 7
