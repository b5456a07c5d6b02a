import print_history
from gymlog.history import add_progress_entry
from tests.utils import USER_ID, make_entry


def test_prints_month_with_supersets(empty_db, capsys):
    add_progress_entry(
        make_entry("Curl", "2024-03-08T11:00:00+00:00", id="a", exercise_id="curl",
                   weight_used=15, pair_id="p", pair_slot=1),
        db_path=empty_db,
    )
    add_progress_entry(
        make_entry("Pushdown", "2024-03-08T11:00:00+00:00", id="b",
                   weight_used=20, pair_id="p", pair_slot=2),
        db_path=empty_db,
    )
    add_progress_entry(
        make_entry("Squat", "2024-03-09T10:00:00+00:00", id="c", notes="deep",
                   sets_data=[{"set_number": 1, "reps": 5, "weight": 90},
                              {"set_number": 2, "reps": 5, "weight": 100}]),
        db_path=empty_db,
    )
    print_history.main(empty_db, USER_ID, 2024, 3)
    out = capsys.readouterr().out
    assert out.index("2024-03-09") < out.index("2024-03-08")
    assert "Curl + Pushdown: 3 sets x 8 reps @ 15kg" in out
    assert "Squat: 3 sets x 8 reps @ 90-100kg" in out
    assert "Notes: deep" in out


def test_empty_month(empty_db, capsys):
    print_history.main(empty_db, USER_ID, 2020, 1)
    assert "No workouts in 2020-01" in capsys.readouterr().out
