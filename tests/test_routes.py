import pytest
from fastapi.testclient import TestClient

from lms_backend.core.database import get_db
from lms_backend.core.dependencies import get_current_active_user, get_current_admin_user
from lms_backend.main import app
from lms_backend.routes.admin_routes import get_session_factory

API = "/api/v1"


@pytest.fixture
def learner(make_user):
    return make_user(display_name="Route Learner")


@pytest.fixture
def admin(make_user):
    return make_user(display_name="Route Admin", role="Admin")


@pytest.fixture
def client(session_factory, learner, admin):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_active_user] = lambda: learner
    app.dependency_overrides[get_current_admin_user] = lambda: admin
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    # No context manager: startup (Firebase, table creation) is not run
    yield TestClient(app)
    app.dependency_overrides.clear()


def _progress(course, video, **fields):
    body = {"course_id": course.id, "video_id": video.id, "current_position": 0}
    body.update(fields)
    return body


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "Welcome" in response.json()["message"]


def test_record_progress(client, make_course, learner):
    course = make_course()

    response = client.post(f"{API}/learn/progress", json=_progress(course, course.videos[0], current_position=50, video_duration=100))

    assert response.status_code == 200
    body = response.json()
    assert body["user_id"] == learner.id
    assert body["progress_percent"] == 50
    assert body["status"] == "in_progress"


def test_record_progress_rejects_negative_position(client, make_course):
    course = make_course()

    response = client.post(f"{API}/learn/progress", json=_progress(course, course.videos[0], current_position=-5))

    assert response.status_code == 422


def test_video_progress_is_created_on_first_read(client, make_course):
    course = make_course()
    video = course.videos[2]

    response = client.get(f"{API}/learn/progress/videos/{video.id}")

    assert response.status_code == 200
    assert response.json()["status"] == "not_started"
    assert response.json()["course_id"] == course.id


def test_unknown_video_maps_to_invalid_input(client):
    response = client.get(f"{API}/learn/progress/videos/9999")

    assert response.status_code == 422
    assert response.json()["code"] == "invalid_input"


def test_course_progress_and_completion(client, make_course):
    course = make_course(n_videos=2)
    client.post(f"{API}/learn/progress", json=_progress(course, course.videos[0], progress_percent=100))

    progress = client.get(f"{API}/learn/progress/courses/{course.id}")
    completion = client.get(f"{API}/learn/courses/{course.id}/completion")

    assert progress.status_code == 200
    assert [record["video_id"] for record in progress.json()] == [course.videos[0].id]
    assert completion.json() == {
        "course_id": course.id,
        "total_videos": 2,
        "completed_videos": 1,
        "completion_percentage": 50.0,
        "is_complete": False,
    }


def test_unknown_course_is_404(client):
    assert client.get(f"{API}/learn/courses/9999/completion").status_code == 404


def test_certificate_request_before_completion(client, make_course):
    course = make_course(n_videos=2)

    response = client.post(f"{API}/learn/courses/{course.id}/certificate")

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert (detail["completed_videos"], detail["total_videos"]) == (0, 2)


def test_completion_issues_certificate_once(client, make_course):
    course = make_course(title="Credit Scores", n_videos=1)
    client.post(f"{API}/learn/progress", json=_progress(course, course.videos[0], current_position=100, video_duration=100))

    response = client.post(f"{API}/learn/courses/{course.id}/certificate")

    assert response.status_code == 200
    assert response.json()["created"] is False
    certificate_id = response.json()["certificate_id"]

    mine = client.get(f"{API}/learn/certificates/my-certificates").json()
    assert [certificate["id"] for certificate in mine] == [certificate_id]
    assert mine[0]["course_title"] == "Credit Scores"
    assert mine[0]["user_name"] == "Route Learner"

    verified = client.get(f"{API}/learn/certificates/{certificate_id}")
    assert verified.status_code == 200


def test_revoked_certificate_no_longer_verifies(client, make_course):
    course = make_course(n_videos=1)
    client.post(f"{API}/learn/progress", json=_progress(course, course.videos[0], progress_percent=100))
    certificate_id = client.get(f"{API}/learn/certificates/my-certificates").json()[0]["id"]

    revoked = client.patch(f"{API}/admin/certificates/{certificate_id}", json={"is_active": False})

    assert revoked.status_code == 200
    assert revoked.json()["is_active"] is False
    assert client.get(f"{API}/learn/certificates/{certificate_id}").status_code == 404
    assert client.get(f"{API}/learn/certificates/my-certificates").json() == []


def test_revoking_unknown_certificate(client):
    response = client.patch(f"{API}/admin/certificates/CERT-0-UNKNOWN", json={"is_active": False})

    assert response.status_code == 404


def test_admin_reconciliation_sweep(client, make_course, monkeypatch):
    from lms_backend.services import progress_tracker

    monkeypatch.setattr(progress_tracker, "_signal_completion", lambda db, user_id, course_id: None)
    course = make_course(n_videos=1)
    client.post(f"{API}/learn/progress", json=_progress(course, course.videos[0], progress_percent=100))

    first = client.post(f"{API}/admin/certificates/reconcile")
    second = client.post(f"{API}/admin/certificates/reconcile")

    assert first.status_code == 200
    assert first.json()["issued"] == 1
    assert first.json()["failures"] == []
    assert second.json()["issued"] == 0
    assert second.json()["already_issued"] == 1

    listed = client.get(f"{API}/admin/courses/{course.id}/certificates")
    assert len(listed.json()) == 1


def test_admin_viewing_history_and_reset(client, make_course, learner):
    course = make_course(n_videos=2)
    for video in course.videos:
        client.post(f"{API}/learn/progress", json=_progress(course, video, progress_percent=60))

    history = client.get(f"{API}/admin/courses/{course.id}/viewing-history")
    assert len(history.json()) == 2

    reset = client.post(f"{API}/admin/progress/reset", json={"user_id": learner.id, "video_id": course.videos[0].id})
    assert reset.status_code == 200
    assert reset.json()["progress_percent"] == 0
    assert reset.json()["status"] == "not_started"

    missing = client.post(f"{API}/admin/progress/reset", json={"user_id": learner.id, "video_id": 9999})
    assert missing.status_code == 404


def test_admin_routes_require_admin_role(client, learner):
    del app.dependency_overrides[get_current_admin_user]

    response = client.post(f"{API}/admin/certificates/reconcile")

    assert response.status_code == 403


def test_requests_without_bearer_token_are_rejected(client):
    app.dependency_overrides.pop(get_current_active_user)

    response = client.get(f"{API}/learn/certificates/my-certificates")

    assert response.status_code == 401


def test_progress_for_video_of_another_course_is_rejected(client, make_course):
    course = make_course(n_videos=1)
    other_course = make_course(title="Other", n_videos=1)

    response = client.post(f"{API}/learn/progress", json=_progress(other_course, course.videos[0], progress_percent=40))

    assert response.status_code == 422
    assert response.json()["code"] == "invalid_input"
    assert client.get(f"{API}/learn/progress/courses/{other_course.id}").json() == []
