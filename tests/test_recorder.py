import sqlite3

import pytest

from gymlog import recorder, session_state, settings
from gymlog.history import get_user_progress
from tests.utils import SAMPLE_TEMPLATE, USER_ID


NOW = "2024-03-08T11:00:00+00:00"


def _complete(state, exercise_index, values):
    for set_index, (reps, weight) in enumerate(values):
        state, _ = session_state.update_set(state, exercise_index, set_index, "reps", reps)
        state, _ = session_state.update_set(state, exercise_index, set_index, "weight", weight)
        state, _ = session_state.update_set(state, exercise_index, set_index, "completed", True)
    return state


@pytest.fixture
def state():
    return session_state.new_template_session(SAMPLE_TEMPLATE, [], 60, NOW)


def test_summarize_sets_example():
    sets = [
        {"set_number": 1, "reps": 8, "weight": 40},
        {"set_number": 2, "reps": 8, "weight": 40},
        {"set_number": 3, "reps": 6, "weight": 42.5},
    ]
    summary = recorder.summarize_sets(sets)
    assert summary["sets_completed"] == 3
    assert summary["weight_used"] == 42.5
    assert summary["reps_completed"] == 7
    assert summary["sets_data"] == sets


def test_mean_reps_round_half_up():
    sets = [
        {"set_number": 1, "reps": 8, "weight": 10},
        {"set_number": 2, "reps": 9, "weight": 10},
    ]
    assert recorder.summarize_sets(sets)["reps_completed"] == 9


def test_only_completed_sets_are_recorded(state):
    state = _complete(state, 0, [(8, 40), (8, 40)])
    entries = recorder.build_progress_entries(state, USER_ID, now=NOW)
    assert len(entries) == 1
    (bench,) = entries
    assert bench["exercise_id"] == "bench"
    assert bench["sets_completed"] == 2
    assert [s["set_number"] for s in bench["sets_data"]] == [1, 2]
    assert bench["date"] == NOW


def test_nothing_completed_writes_nothing(state):
    assert recorder.build_progress_entries(state, USER_ID, now=NOW) == []


def test_superset_yields_two_unlinked_entries(state):
    state, _ = session_state.update_set(state, 1, 0, "partner_reps", 14)
    state = _complete(state, 1, [(12, 12.5)])
    state = session_state.update_notes(state, 1, "slow negatives")
    primary, partner = recorder.build_progress_entries(state, USER_ID, now=NOW)
    assert primary["exercise_name"] == "Curl"
    assert primary["notes"] == "slow negatives"
    assert partner["exercise_name"] == "Pushdown"
    assert partner["muscle"] == "Triceps"
    assert partner["exercise_id"] == ""
    assert partner["notes"] is None
    assert partner["reps_completed"] == 14
    assert partner["weight_used"] == 20
    assert primary["id"] != partner["id"]
    assert primary["pair_id"] is None and partner["pair_id"] is None


def test_custom_superset_name_is_parsed_back_to_the_primary():
    state = session_state.new_custom_session("Custom", 60, NOW)
    state = session_state.add_exercise(
        state,
        {"name": "Curl", "muscle": "Biceps", "sets": 1,
         "partner": {"name": "Dip", "muscle": "Chest"}},
    )
    state = _complete(state, 0, [(10, 15)])
    primary, partner = recorder.build_progress_entries(state, USER_ID, now=NOW)
    assert primary["exercise_name"] == "Curl"
    assert partner["exercise_name"] == "Dip"


def test_linked_supersets_share_a_pair_id(state):
    state = _complete(state, 1, [(12, 12.5)])
    primary, partner = recorder.build_progress_entries(
        state, USER_ID, now=NOW, link_supersets=True
    )
    assert primary["pair_id"] == partner["pair_id"] is not None
    assert (primary["pair_slot"], partner["pair_slot"]) == (1, 2)


def test_record_session_writes_history(sample_db, state):
    state = _complete(state, 0, [(8, 40), (8, 40), (6, 42.5)])
    state = _complete(state, 1, [(12, 12.5)])
    result = recorder.record_session(state, USER_ID, db_path=sample_db, now=NOW)
    assert result["failed"] == []
    assert len(result["written"]) == 3
    stored = get_user_progress(USER_ID, db_path=sample_db)
    assert sorted(e["exercise_name"] for e in stored) == ["Bench Press", "Curl", "Pushdown"]
    bench = next(e for e in stored if e["exercise_name"] == "Bench Press")
    assert bench["weight_used"] == 42.5
    assert bench["reps_completed"] == 7


def test_record_session_follows_link_setting(sample_db, state):
    settings.set_value("link_supersets", True)
    state = _complete(state, 1, [(12, 12.5)])
    result = recorder.record_session(state, USER_ID, db_path=sample_db, now=NOW)
    primary, partner = result["written"]
    assert primary["pair_id"] == partner["pair_id"] is not None


def test_failed_write_does_not_stop_the_rest(sample_db, state, monkeypatch):
    state = _complete(state, 0, [(8, 40)])
    state = _complete(state, 1, [(12, 12.5)])
    real_add = recorder.add_progress_entry

    def flaky_add(entry, db_path):
        if entry["exercise_name"] == "Bench Press":
            raise sqlite3.OperationalError("disk I/O error")
        return real_add(entry, db_path=db_path)

    monkeypatch.setattr(recorder, "add_progress_entry", flaky_add)
    result = recorder.record_session(state, USER_ID, db_path=sample_db, now=NOW)
    assert [f["exercise_name"] for f in result["failed"]] == ["Bench Press"]
    assert "disk I/O error" in result["failed"][0]["error"]
    assert [e["exercise_name"] for e in result["written"]] == ["Curl", "Pushdown"]


def test_assigned_superset_uses_the_partner_suffix(state):
    state = _complete(state, 1, [(12, 12.5)])
    primary, partner = recorder.build_assigned_entries(state["exercises"][1], USER_ID, NOW)
    assert primary["exercise_id"] == "curl"
    assert partner["exercise_id"] == "curl_ex2"
    assert primary["pair_id"] == partner["pair_id"] is not None


def test_record_assigned_exercise(sample_db, state):
    state = _complete(state, 0, [(8, 40)])
    (entry,) = recorder.record_assigned_exercise(
        state["exercises"][0], USER_ID, db_path=sample_db, date=NOW
    )
    assert entry["exercise_id"] == "bench"
    assert entry["pair_id"] is None
    assert get_user_progress(USER_ID, db_path=sample_db)[0]["id"] == entry["id"]
