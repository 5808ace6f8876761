import threading

import httpx
import pytest

from classboard.client.api_client import ApiError, ClassroomApiClient
from classboard.client.session import SessionStore, View, restore_session
from classboard.client.sync import ClassroomPoller

from conftest import CLASS_FIELDS


@pytest.fixture
def api(client):
    return ClassroomApiClient(http=client)


@pytest.fixture
def seeded(api):
    """Classroom with one named student; returns (classroom_id, token, student)."""
    created = api.create_classroom(**CLASS_FIELDS)
    classroom_id, token = created["classroom"]["id"], created["teacher_token"]
    student = api.add_student(classroom_id, token)["new_student"]
    return classroom_id, token, student


def _offline_api():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)
    return ClassroomApiClient(http=httpx.Client(transport=httpx.MockTransport(handler),
                                                base_url="http://testserver"))


def _proxy_page_api():
    def handler(request):
        return httpx.Response(200, text="<html>proxy</html>", headers={"Content-Type": "text/html"})
    return ClassroomApiClient(http=httpx.Client(transport=httpx.MockTransport(handler),
                                                base_url="http://testserver"))


def test_api_error_carries_server_message(api):
    with pytest.raises(ApiError) as excinfo:
        api.get_classroom("CLS-NOPE")
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Classroom not found."


def test_api_client_teacher_flow(api, seeded):
    classroom_id, token, student = seeded
    api.update_score(classroom_id, student["id"], 12, token)
    assert api.get_classroom(classroom_id)["students"][0]["score"] == 12
    assert api.reset_scores(classroom_id, token)["students"][0]["score_history"][0]["score"] == 12
    assert api.update_announcement(classroom_id, "Hi", token)["announcement"] == "Hi"
    assert api.get_secret_question(classroom_id) == CLASS_FIELDS["secret_question"]
    assert api.get_stats(classroom_id)["student_count"] == 1
    api.remove_student(classroom_id, student["id"], token)
    assert api.delete_classroom(classroom_id, token)["message"]


def test_poll_once_replaces_state_and_tracks_student(api, seeded):
    classroom_id, token, student = seeded
    updates = []
    poller = ClassroomPoller(api, classroom_id, student_id=student["id"],
                             on_update=lambda c, s: updates.append((c, s)))

    api.update_score(classroom_id, student["id"], 42, token)
    assert poller.poll_once()

    assert poller.classroom["id"] == classroom_id
    assert poller.student["score"] == 42
    assert updates[-1][1]["score"] == 42


def test_poll_failure_keeps_last_known_state(api, seeded):
    classroom_id, token, student = seeded
    initial = api.get_classroom(classroom_id)
    poller = ClassroomPoller(_offline_api(), classroom_id, student_id=student["id"], classroom=initial)

    assert not poller.poll_once()
    assert poller.failures == 1
    assert poller.classroom is initial
    assert poller.student["id"] == student["id"]


def test_poll_of_deleted_classroom_keeps_state(api, seeded):
    classroom_id, token, _ = seeded
    poller = ClassroomPoller(api, classroom_id)
    assert poller.poll_once()
    api.delete_classroom(classroom_id, token)
    assert not poller.poll_once()
    assert poller.classroom["id"] == classroom_id


def test_api_client_rejects_success_without_json_object():
    with pytest.raises(ApiError) as excinfo:
        _proxy_page_api().get_classroom("CLS-MATH-4B")
    assert excinfo.value.status_code == 200


def test_poll_of_html_page_keeps_last_known_state(api, seeded):
    classroom_id, _, student = seeded
    initial = api.get_classroom(classroom_id)
    poller = ClassroomPoller(_proxy_page_api(), classroom_id, student_id=student["id"], classroom=initial)

    assert not poller.poll_once()
    assert poller.failures == 1
    assert poller.classroom is initial
    assert poller.student["id"] == student["id"]


def test_failing_update_callback_does_not_stop_polling(api, seeded):
    classroom_id, _, _ = seeded
    calls = []
    ticked = threading.Event()

    def on_update(classroom, student):
        calls.append(classroom)
        if len(calls) == 1:
            raise RuntimeError("view is gone")
        ticked.set()

    poller = ClassroomPoller(api, classroom_id, interval=0.01, on_update=on_update)
    poller.start()
    try:
        assert ticked.wait(5)
        assert poller.running
    finally:
        poller.stop(timeout=5)
    assert len(calls) >= 2


def test_poller_thread_runs_until_stopped(api, seeded):
    classroom_id, _, _ = seeded
    ticked = threading.Event()
    poller = ClassroomPoller(api, classroom_id, interval=0.01, on_update=lambda c, s: ticked.set())

    poller.start()
    assert poller.running
    assert ticked.wait(5)
    poller.stop(timeout=5)
    assert not poller.running

    ticked.clear()
    assert not ticked.wait(0.1)


def test_stop_without_start_is_harmless(api):
    poller = ClassroomPoller(api, "CLS-ANY", interval=60)
    poller.stop()
    assert not poller.running


def test_restore_session_views(api, seeded):
    classroom_id, token, student = seeded
    store = SessionStore()

    assert restore_session(api, store).view is View.LOGIN

    store.remember_teacher(classroom_id, token)
    restored = restore_session(api, store)
    assert restored.view is View.TEACHER
    assert restored.teacher_token == token

    store.remember_student(classroom_id, student["access_code"])
    restored = restore_session(api, store)
    assert restored.view is View.SET_USERNAME
    assert restored.student["id"] == student["id"]

    api.set_student_name(classroom_id, student["access_code"], "Alice")
    assert restore_session(api, store).view is View.STUDENT


def test_restore_session_clears_unknown_code_or_classroom(api, seeded):
    classroom_id, _, _ = seeded
    store = SessionStore()

    store.remember_student(classroom_id, "0000")
    assert restore_session(api, store).view is View.LOGIN
    assert store.get("class_code") is None

    store.remember_student("CLS-GONE", "1234")
    assert restore_session(api, store).view is View.LOGIN
    assert store.get("class_code") is None


def test_session_store_persists_to_file(tmp_path):
    path = tmp_path / "session.json"
    SessionStore(path).remember_student("CLS-MATH-4B", "4821")

    reloaded = SessionStore(path)
    assert reloaded.get("class_code") == "CLS-MATH-4B"
    assert reloaded.get("student_access_code") == "4821"
    assert reloaded.get("teacher_token") is None

    with pytest.raises(KeyError):
        reloaded.set("password", "pw1234")
