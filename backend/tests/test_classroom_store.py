import pytest

from classboard.errors import InvalidInput, NotFound, Conflict, Forbidden, Unauthenticated
from classboard.models.student import Student
from classboard.models.score_record import ScoreRecord
from classboard.serializers import serialize_classroom
from classboard.services import classroom_store
from classboard.services.classroom_store import ClassroomStore
from classboard.services.locking import ClassroomLocks

from conftest import CLASS_FIELDS


def test_create_derives_id_and_hashes_credentials(classroom):
    created, token = classroom
    assert created.id == "CLS-MATH-4B"
    assert created.name == "Math 4B"
    assert created.teacher_token == token
    assert created.announcement is None
    assert created.students == []
    assert created.password_hash != "pw1234"
    assert created.password_salt != created.secret_answer_salt


def test_create_trims_fields(store):
    created, _ = store.create("pw1234", "  Science  ", "  Favourite colour?  ", "  blue  ")
    assert created.name == "Science"
    assert created.secret_question == "Favourite colour?"


@pytest.mark.parametrize("field, value", [
    ("password", "abc"),
    ("name", " x "),
    ("secret_question", "Pet name?"),
    ("secret_answer", " Rex "),
    ("password", ""),
])
def test_create_enforces_minimum_lengths(store, field, value):
    fields = dict(CLASS_FIELDS, **{field: value})
    with pytest.raises(InvalidInput):
        store.create(**fields)


def test_create_conflicts_on_same_derived_id(store, classroom):
    with pytest.raises(Conflict):
        store.create(**dict(CLASS_FIELDS, name="math   4b"))


def test_create_race_on_same_id_is_a_conflict(store, session_factory, monkeypatch):
    other = session_factory()
    ClassroomStore(other, locks=ClassroomLocks()).create(**CLASS_FIELDS)
    other.close()

    # The existence check misses the row another process just inserted
    monkeypatch.setattr(classroom_store, "load_classroom", lambda *args, **kwargs: None)
    with pytest.raises(Conflict):
        store.create(**CLASS_FIELDS)
    monkeypatch.undo()

    assert not store.db.new
    assert store.get("CLS-MATH-4B").name == "Math 4B"


def test_create_rolls_back_on_any_failure(store, monkeypatch):
    def broken_flush(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(store.db, "flush", broken_flush)
    with pytest.raises(RuntimeError):
        store.create(**CLASS_FIELDS)
    monkeypatch.undo()

    assert not store.db.new
    with pytest.raises(NotFound):
        store.get("CLS-MATH-4B")


def test_get_projection_has_no_secrets(store, classroom):
    public = serialize_classroom(store.get("CLS-MATH-4B"))
    assert set(public) == {"id", "name", "students", "announcement", "secret_question"}
    flat = repr(public)
    created, token = classroom
    assert token not in flat
    assert created.password_salt not in flat


def test_get_unknown_classroom(store):
    with pytest.raises(NotFound):
        store.get("CLS-NOPE")


def test_add_student_appends_in_order_with_unique_codes(store, classroom):
    _, token = classroom
    added = [store.add_student("CLS-MATH-4B", token)[1] for _ in range(5)]
    students = store.get("CLS-MATH-4B").students
    assert [s.id for s in students] == [s.id for s in added]
    assert len({s.access_code for s in students}) == 5
    assert all(s.score == 0 and s.name is None and s.score_history == [] for s in students)


def test_access_codes_may_repeat_across_classrooms(store, classroom, monkeypatch):
    _, token = classroom
    other, other_token = store.create(**dict(CLASS_FIELDS, name="History 2"))
    monkeypatch.setattr(classroom_store, "generate_access_code", lambda existing: "4821")
    store.add_student("CLS-MATH-4B", token)
    store.add_student(other.id, other_token)
    assert store.db.query(Student).filter(Student.access_code == "4821").count() == 2


def test_positions_keep_growing_after_removal(store, classroom):
    _, token = classroom
    first = store.add_student("CLS-MATH-4B", token)[1]
    store.add_student("CLS-MATH-4B", token)
    store.remove_student("CLS-MATH-4B", first.id, token)
    third = store.add_student("CLS-MATH-4B", token)[1]
    assert [s.id for s in store.get("CLS-MATH-4B").students][-1] == third.id


def test_join_as_student(store, classroom):
    _, token = classroom
    _, student = store.add_student("CLS-MATH-4B", token)
    joined_classroom, joined = store.join_as_student("CLS-MATH-4B", student.access_code)
    assert joined.id == student.id
    assert joined_classroom.id == "CLS-MATH-4B"

    with pytest.raises(Forbidden):
        store.join_as_student("CLS-MATH-4B", "0000")
    with pytest.raises(NotFound):
        store.join_as_student("CLS-OTHER", student.access_code)


def test_set_student_name_is_set_once(store, classroom):
    _, token = classroom
    _, student = store.add_student("CLS-MATH-4B", token)
    code = student.access_code

    assert store.set_student_name("CLS-MATH-4B", code, "  Alice ").name == "Alice"
    assert store.set_student_name("CLS-MATH-4B", code, "Mallory").name == "Alice"
    assert store.get("CLS-MATH-4B").students[0].name == "Alice"


def test_set_student_name_errors(store, classroom):
    _, token = classroom
    _, student = store.add_student("CLS-MATH-4B", token)
    with pytest.raises(InvalidInput):
        store.set_student_name("CLS-MATH-4B", student.access_code, " a ")
    with pytest.raises(NotFound):
        store.set_student_name("CLS-MATH-4B", "0000", "Alice")
    with pytest.raises(NotFound):
        store.set_student_name("CLS-NOPE", student.access_code, "Alice")


def test_update_score_accepts_any_integer(store, classroom):
    _, token = classroom
    _, student = store.add_student("CLS-MATH-4B", token)
    for value in (87, -12, 10 ** 9, 2 ** 63, -(2 ** 70), 10 ** 40 + 1):
        store.update_score("CLS-MATH-4B", student.id, value, token)
        store.db.expire_all()
        assert store.get("CLS-MATH-4B").students[0].score == value

    store.reset_scores("CLS-MATH-4B", token)
    store.db.expire_all()
    reloaded = store.get("CLS-MATH-4B").students[0]
    assert reloaded.score == 0
    assert reloaded.score_history[-1].score == 10 ** 40 + 1

    with pytest.raises(NotFound):
        store.update_score("CLS-MATH-4B", "S-MISSING", 1, token)


def test_protected_operations_check_token(store, classroom):
    _, token = classroom
    _, student = store.add_student("CLS-MATH-4B", token)

    with pytest.raises(Unauthenticated):
        store.update_score("CLS-MATH-4B", student.id, 5, None)
    with pytest.raises(Unauthenticated):
        store.reset_scores("CLS-MATH-4B", "  ")
    with pytest.raises(Forbidden):
        store.update_score("CLS-MATH-4B", student.id, 5, "not-the-token")
    with pytest.raises(Forbidden):
        store.add_student("CLS-NOPE", token)
    assert store.get("CLS-MATH-4B").students[0].score == 0


def test_remove_student_deletes_history(store, classroom):
    _, token = classroom
    _, student = store.add_student("CLS-MATH-4B", token)
    store.update_score("CLS-MATH-4B", student.id, 3, token)
    store.reset_scores("CLS-MATH-4B", token)

    store.remove_student("CLS-MATH-4B", student.id, token)
    assert store.get("CLS-MATH-4B").students == []
    assert store.db.query(ScoreRecord).count() == 0
    with pytest.raises(NotFound):
        store.remove_student("CLS-MATH-4B", student.id, token)


def test_reset_scores_archives_then_zeroes(store, classroom, today):
    _, token = classroom
    ids = [store.add_student("CLS-MATH-4B", token)[1].id for _ in range(3)]
    for student_id, score in zip(ids, (87, 0, -4)):
        store.update_score("CLS-MATH-4B", student_id, score, token)

    store.reset_scores("CLS-MATH-4B", token)

    students = store.get("CLS-MATH-4B").students
    assert [s.score for s in students] == [0, 0, 0]
    assert [[(r.date, r.score) for r in s.score_history] for s in students] == [
        [(today, 87)], [(today, 0)], [(today, -4)]
    ]


def test_same_day_resets_append_separate_entries(store, classroom):
    _, token = classroom
    _, student = store.add_student("CLS-MATH-4B", token)
    store.update_score("CLS-MATH-4B", student.id, 10, token)
    store.reset_scores("CLS-MATH-4B", token)
    store.update_score("CLS-MATH-4B", student.id, 7, token)
    store.reset_scores("CLS-MATH-4B", token)

    history = store.get("CLS-MATH-4B").students[0].score_history
    assert [r.score for r in history] == [10, 7]
    assert history[0].date == history[1].date


def test_update_announcement_blank_clears(store, classroom):
    _, token = classroom
    assert store.update_announcement("CLS-MATH-4B", "Quiz on Friday", token).announcement == "Quiz on Friday"
    assert store.update_announcement("CLS-MATH-4B", "   ", token).announcement is None
    store.update_announcement("CLS-MATH-4B", "Again", token)
    assert store.update_announcement("CLS-MATH-4B", None, token).announcement is None


def test_delete_cascades(store, classroom):
    _, token = classroom
    _, student = store.add_student("CLS-MATH-4B", token)
    store.update_score("CLS-MATH-4B", student.id, 5, token)
    store.reset_scores("CLS-MATH-4B", token)

    store.delete("CLS-MATH-4B", token)

    with pytest.raises(NotFound):
        store.get("CLS-MATH-4B")
    assert store.db.query(Student).count() == 0
    assert store.db.query(ScoreRecord).count() == 0


def test_delete_requires_valid_token(store, classroom):
    with pytest.raises(Forbidden):
        store.delete("CLS-MATH-4B", "bogus")
    assert store.get("CLS-MATH-4B").id == "CLS-MATH-4B"
