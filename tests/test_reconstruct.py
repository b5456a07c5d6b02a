import json

from gymlog import reconstruct, session_state, settings
from gymlog.recorder import build_assigned_entries, build_progress_entries
from tests.utils import SAMPLE_TEMPLATE, USER_ID, make_entry


def _finished_session(now):
    state = session_state.new_template_session(SAMPLE_TEMPLATE, [], 60, now)
    for ex_index in (0, 1):
        state, _ = session_state.update_set(state, ex_index, 0, "completed", True)
    return state


def test_recorder_output_round_trips_as_standalone_entries():
    now = "2024-03-08T11:00:00+00:00"
    log = build_progress_entries(_finished_session(now), USER_ID, now=now)
    (day,) = reconstruct.sessions_by_date(log)
    assert day["date"] == "2024-03-08"
    names = [r["exercise_name"] for r in day["exercises"]]
    assert names == ["Bench Press", "Curl", "Pushdown"]
    assert not any(r["is_superset"] for r in day["exercises"])


def test_linked_recorder_output_is_merged():
    now = "2024-03-08T11:00:00+00:00"
    log = build_progress_entries(_finished_session(now), USER_ID, now=now, link_supersets=True)
    (day,) = reconstruct.sessions_by_date(log)
    names = [r["exercise_name"] for r in day["exercises"]]
    assert names == ["Bench Press", "Curl"]
    curl = day["exercises"][1]
    assert curl["is_superset"] is True
    assert curl["exercise2"]["exercise_name"] == "Pushdown"
    assert len(curl["entry_ids"]) == 2


def test_assigned_entries_pair_via_pair_id():
    state = _finished_session("2024-03-08T11:00:00+00:00")
    log = build_assigned_entries(state["exercises"][1], USER_ID, "2024-03-08T11:00:00+00:00")
    (record,) = reconstruct.group_day(log)
    assert record["is_superset"]
    assert record["exercise_id"] == "curl"
    assert record["exercise2"]["exercise_id"] == "curl_ex2"


def test_legacy_suffix_pairs_within_window():
    log = [
        make_entry("Pushdown", "2024-03-08T11:00:30+00:00", id="b", exercise_id="curl_ex2"),
        make_entry("Curl", "2024-03-08T11:00:00+00:00", id="a", exercise_id="curl"),
    ]
    (record,) = reconstruct.group_day(log)
    assert record["exercise_name"] == "Curl"
    assert record["exercise2"]["exercise_name"] == "Pushdown"
    assert record["entry_ids"] == ["a", "b"]


def test_legacy_suffix_outside_window_stays_standalone():
    log = [
        make_entry("Curl", "2024-03-08T11:00:00+00:00", id="a", exercise_id="curl"),
        make_entry("Pushdown", "2024-03-08T11:02:00+00:00", id="b", exercise_id="curl_ex2"),
    ]
    records = reconstruct.group_day(log)
    assert [r["is_superset"] for r in records] == [False, False]
    assert len(reconstruct.group_day(log, window_seconds=180)) == 1


def test_each_entry_is_used_once():
    log = [
        make_entry("Curl", "2024-03-08T11:00:00+00:00", id="a", exercise_id="curl"),
        make_entry("Pushdown", "2024-03-08T11:00:10+00:00", id="b", exercise_id="curl_ex2"),
        make_entry("Pushdown", "2024-03-08T11:00:20+00:00", id="c", exercise_id="curl_ex2"),
    ]
    records = reconstruct.group_day(log)
    assert sorted(len(r["entry_ids"]) for r in records) == [1, 2]
    merged = next(r for r in records if r["is_superset"])
    assert merged["entry_ids"] == ["a", "b"]


def test_half_a_pair_is_rendered_alone():
    log = [
        make_entry("Curl", "2024-03-08T11:00:00+00:00", id="a", pair_id="p", pair_slot=1),
    ]
    (record,) = reconstruct.group_day(log)
    assert record["is_superset"] is False
    assert record["exercise2"] is None


def test_records_sorted_by_name_within_a_day():
    log = [
        make_entry("squat", "2024-03-08T10:00:00+00:00"),
        make_entry("Bench", "2024-03-08T10:05:00+00:00"),
        make_entry("Deadlift", "2024-03-08T10:10:00+00:00"),
    ]
    names = [r["exercise_name"] for r in reconstruct.group_day(log)]
    assert names == ["Bench", "Deadlift", "squat"]


def test_days_newest_first_by_written_date():
    log = [
        make_entry("Squat", "2024-03-01T23:30:00-05:00"),
        make_entry("Squat", "2024-03-02T01:00:00+00:00"),
        make_entry("Squat", "2024-02-27T09:00:00+00:00"),
    ]
    sessions = reconstruct.sessions_by_date(log)
    assert [s["date"] for s in sessions] == ["2024-03-02", "2024-03-01", "2024-02-27"]


def test_regrouping_is_idempotent():
    log = [
        make_entry("Curl", "2024-03-08T11:00:00+00:00", id="a", exercise_id="curl"),
        make_entry("Pushdown", "2024-03-08T11:00:05+00:00", id="b", exercise_id="curl_ex2"),
        make_entry("Row", "2024-03-08T11:00:05+00:00", id="c", pair_id="p", pair_slot=1),
        make_entry("Fly", "2024-03-08T11:00:05+00:00", id="d", pair_id="p", pair_slot=2),
        make_entry("Squat", "2024-03-07T09:00:00+00:00", id="e"),
    ]
    first = json.dumps(reconstruct.sessions_by_date(log))
    second = json.dumps(reconstruct.sessions_by_date(list(reversed(log))))
    assert first == second


def test_window_setting_is_used():
    settings.set_value("pairing_window_seconds", 5)
    log = [
        make_entry("Curl", "2024-03-08T11:00:00+00:00", id="a", exercise_id="curl"),
        make_entry("Pushdown", "2024-03-08T11:00:30+00:00", id="b", exercise_id="curl_ex2"),
    ]
    (day,) = reconstruct.sessions_by_date(log)
    assert len(day["exercises"]) == 2
    assert day["entry_ids"] == ["a", "b"]


def test_month_filter_and_years():
    log = [
        make_entry("Squat", "2023-12-31T10:00:00+00:00"),
        make_entry("Squat", "2024-01-15T10:00:00+00:00"),
        make_entry("Squat", "2024-02-01T10:00:00+00:00"),
    ]
    assert [e["date"][:10] for e in reconstruct.filter_month(log, 2024, 1)] == ["2024-01-15"]
    assert reconstruct.available_years(log) == [2024, 2023]


def test_weight_range():
    record = make_entry(
        "Squat",
        "2024-01-15T10:00:00+00:00",
        weight_used=100,
        sets_data=[
            {"set_number": 1, "reps": 5, "weight": 90},
            {"set_number": 2, "reps": 5, "weight": 100},
        ],
    )
    assert reconstruct.weight_range(record) == (90, 100)
    assert reconstruct.weight_range({**record, "sets_data": None}) == (100, 100)
