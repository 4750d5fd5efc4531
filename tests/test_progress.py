from progress import (
    advance, as_json, reset, set_case, set_done, set_message, set_phase,
    set_status, set_total, snapshot, start_timer,
)


def test_reset_increments_run_identifier():
    reset()
    first = snapshot()["run_id"]
    reset()
    second = snapshot()
    assert second["run_id"] == first + 1
    assert second["status"] == "Idle"
    assert second["processed"] == 0
    assert second["done"] is False
    assert second["ok"] is None


def test_advance_tallies_verdicts_and_percent():
    reset()
    set_total(4)
    start_timer()
    advance(agreed=True)
    advance(agreed=False)
    advance(exhausted=True)
    snap = snapshot()
    assert snap["status"] == "Running"
    assert snap["processed"] == 3
    assert snap["agreements"] == 1
    assert snap["disagreements"] == 1
    assert snap["exhausted"] == 1
    assert snap["percent"] == 75.0


def test_set_done_defaults_to_finished():
    reset()
    set_total(10)
    set_phase("exact")
    set_case(3)
    set_done()
    snap = snapshot()
    assert snap["status"] == "Finished"
    assert snap["percent"] == 100.0
    assert snap["done"] is True
    assert snap["ok"] is True
    assert snap["phase"] == ""
    assert snap["case"] == ""


def test_set_done_failure_keeps_message_and_percent():
    reset()
    set_total(4)
    advance(agreed=True)
    set_done(False, message="boom")
    snap = snapshot()
    assert snap["status"] == "Error"
    assert snap["ok"] is False
    assert snap["message"] == "boom"
    assert snap["percent"] == 25.0


def test_zero_total_never_divides():
    reset()
    set_total(0)
    advance(agreed=True)
    assert snapshot()["percent"] == 0.0


def test_snapshot_hides_timer_and_formats_elapsed():
    reset()
    set_status("Running")
    set_message(None)
    snap = as_json()
    assert "elapsed_start" not in snap
    assert snap["elapsed_str"] == "0s"
    assert snap["message"] == ""
    assert snap["status"] == "Running"
