from datetime import datetime, timezone

import pytest

from lms_backend.core.exceptions import InvalidInput
from lms_backend.crud import certificate_crud, viewing_record_crud
from lms_backend.models import ViewingRecord, ViewingStatus
from lms_backend.schemas.viewing_record_schema import ProgressUpdate
from lms_backend.services import completion_evaluator, progress_tracker
from lms_backend.services.completion_evaluator import as_utc


def _update(user, course, video_id, **fields):
    payload = {"user_id": user.id, "course_id": course.id, "video_id": video_id, "current_position": 0}
    payload.update(fields)
    return payload


@pytest.mark.parametrize(
    "position,duration,expected",
    [
        (50, 100, 50),
        (1, 8, 13),
        (0, 100, 0),
        (150, 100, 100),
    ],
)
def test_compute_progress_percent(position, duration, expected):
    assert progress_tracker.compute_progress_percent(position, duration) == expected


def test_compute_progress_percent_rejects_zero_duration():
    with pytest.raises(InvalidInput):
        progress_tracker.compute_progress_percent(10, 0)


@pytest.mark.parametrize(
    "percent,expected",
    [
        (0, ViewingStatus.NOT_STARTED),
        (1, ViewingStatus.IN_PROGRESS),
        (94, ViewingStatus.IN_PROGRESS),
        (95, ViewingStatus.COMPLETED),
        (100, ViewingStatus.COMPLETED),
    ],
)
def test_derive_status_thresholds(percent, expected):
    assert progress_tracker.derive_status(percent) == expected


def test_position_and_duration_give_percent_and_status(db, make_user, make_course):
    user = make_user()
    course = make_course()
    video_id = course.videos[0].id

    record = progress_tracker.record_progress(
        db, _update(user, course, video_id, current_position=50, video_duration=100)
    )

    assert record.progress_percent == 50
    assert record.status == ViewingStatus.IN_PROGRESS
    assert record.completed_at is None
    assert record.start_time is not None


def test_accepts_a_validated_update_model(db, make_user, make_course):
    user = make_user()
    course = make_course()
    update = ProgressUpdate(user_id=user.id, course_id=course.id, video_id=course.videos[0].id, current_position=10, progress_percent=20)

    record = progress_tracker.record_progress(db, update)

    assert record.progress_percent == 20
    assert record.status == ViewingStatus.IN_PROGRESS


def test_explicit_percent_wins_over_position(db, make_user, make_course):
    user = make_user()
    course = make_course()

    record = progress_tracker.record_progress(
        db, _update(user, course, course.videos[0].id, current_position=10, video_duration=100, progress_percent=97)
    )

    assert record.progress_percent == 97
    assert record.status == ViewingStatus.COMPLETED
    assert record.completed_at is not None


def test_catalog_duration_used_when_player_sends_none(db, make_user, make_course):
    user = make_user()
    course = make_course(durations=[200.0])

    record = progress_tracker.record_progress(db, _update(user, course, course.videos[0].id, current_position=100))

    assert record.progress_percent == 50


def test_unknown_duration_keeps_stored_percent(db, make_user, make_course):
    user = make_user()
    course = make_course(durations=[None])
    video_id = course.videos[0].id

    progress_tracker.record_progress(db, _update(user, course, video_id, current_position=5, progress_percent=40))
    record = progress_tracker.record_progress(db, _update(user, course, video_id, current_position=60))

    assert record.current_position == 60
    assert record.progress_percent == 40


def test_one_record_per_user_and_video(db, make_user, make_course):
    user = make_user()
    course = make_course()
    video_id = course.videos[0].id

    first = progress_tracker.record_progress(db, _update(user, course, video_id, current_position=10, progress_percent=10))
    second = progress_tracker.record_progress(db, _update(user, course, video_id, current_position=30, progress_percent=30))

    assert first.id == second.id
    assert db.query(ViewingRecord).filter(ViewingRecord.user_id == user.id).count() == 1
    assert second.progress_percent == 30


def test_completion_is_sticky(db, make_user, make_course):
    user = make_user()
    course = make_course()
    video_id = course.videos[0].id

    completed = progress_tracker.record_progress(
        db, _update(user, course, video_id, current_position=99, progress_percent=99, total_watched_time=120)
    )
    completed_at = completed.completed_at

    record = progress_tracker.record_progress(
        db, _update(user, course, video_id, current_position=12, progress_percent=10, total_watched_time=30)
    )

    assert record.status == ViewingStatus.COMPLETED
    assert record.progress_percent == 99
    assert record.current_position == 12
    assert record.total_watched_time == 120
    assert record.completed_at == completed_at


def test_start_time_is_kept_and_end_time_moves(db, make_user, make_course):
    user = make_user()
    course = make_course()
    video_id = course.videos[0].id
    started = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
    later = datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc)

    progress_tracker.record_progress(db, _update(user, course, video_id, progress_percent=10, start_time=started, end_time=started))
    record = progress_tracker.record_progress(
        db, _update(user, course, video_id, progress_percent=20, start_time=later, end_time=later)
    )

    assert as_utc(record.start_time) == started
    assert as_utc(record.end_time) == later


def test_session_id_is_recorded(db, make_user, make_course):
    user = make_user()
    course = make_course()

    record = progress_tracker.record_progress(
        db, _update(user, course, course.videos[0].id, progress_percent=5, session_id="player-abc")
    )

    assert record.session_id == "player-abc"


@pytest.mark.parametrize(
    "overrides",
    [
        {"user_id": 0},
        {"video_id": -3},
        {"current_position": -1},
        {"progress_percent": 101},
        {"video_duration": 0},
    ],
)
def test_malformed_updates_are_rejected(db, make_user, make_course, overrides):
    user = make_user()
    course = make_course()
    payload = _update(user, course, course.videos[0].id, current_position=1)
    payload.update(overrides)

    with pytest.raises(InvalidInput):
        progress_tracker.record_progress(db, payload)

    assert db.query(ViewingRecord).count() == 0


def test_missing_field_is_rejected(db):
    with pytest.raises(InvalidInput):
        progress_tracker.record_progress(db, {"user_id": 1, "video_id": 1, "current_position": 3})


def test_concurrent_first_write_merges_into_existing_row(db, session_factory, make_user, make_course, monkeypatch):
    user = make_user()
    course = make_course()
    video_id = course.videos[0].id

    other = session_factory()
    try:
        progress_tracker.record_progress(other, _update(user, course, video_id, current_position=40, progress_percent=40, total_watched_time=50))
    finally:
        other.close()

    real_get = viewing_record_crud.get_viewing_record
    calls = []

    def stale_first_read(session, user_id, vid):
        calls.append(vid)
        if len(calls) == 1:
            return None
        return real_get(session, user_id, vid)

    monkeypatch.setattr(viewing_record_crud, "get_viewing_record", stale_first_read)

    record = progress_tracker.record_progress(db, _update(user, course, video_id, current_position=60, progress_percent=60, total_watched_time=20))

    assert len(calls) == 2
    assert record.progress_percent == 60
    assert record.total_watched_time == 50
    assert db.query(ViewingRecord).count() == 1


def test_completing_last_video_issues_certificate(db, make_user, make_course):
    user = make_user()
    course = make_course(n_videos=2)

    for video in course.videos:
        progress_tracker.record_progress(db, _update(user, course, video.id, current_position=100, video_duration=100))

    certificate = certificate_crud.get_certificate_for_user_course(db, user.id, course.id)
    assert certificate is not None
    assert certificate.course_title == course.title


def test_failed_certificate_check_does_not_fail_the_write(db, make_user, make_course, monkeypatch):
    from lms_backend.core.exceptions import DependencyUnavailable
    from lms_backend.services import certificate_issuer

    def unavailable(*args, **kwargs):
        raise DependencyUnavailable("catalog down")

    monkeypatch.setattr(certificate_issuer, "issue_certificate_if_eligible", unavailable)
    user = make_user()
    course = make_course(n_videos=1)

    record = progress_tracker.record_progress(db, _update(user, course, course.videos[0].id, progress_percent=100))

    assert record.status == ViewingStatus.COMPLETED


def test_get_progress_creates_not_started_record_once(db, make_user, make_course):
    user = make_user()
    course = make_course()
    video_id = course.videos[1].id

    assert progress_tracker.get_progress(db, user.id, video_id) is None

    created = progress_tracker.get_progress(db, user.id, video_id, create_if_missing=True)
    again = progress_tracker.get_progress(db, user.id, video_id, create_if_missing=True)

    assert created.status == ViewingStatus.NOT_STARTED
    assert created.progress_percent == 0
    assert created.course_id == course.id
    assert again.id == created.id


def test_get_progress_for_unknown_video(db, make_user):
    user = make_user()

    with pytest.raises(InvalidInput):
        progress_tracker.get_progress(db, user.id, 9999, create_if_missing=True)


def test_list_course_progress(db, make_user, make_course):
    user = make_user()
    course = make_course()
    other_course = make_course(title="Other")

    for video in course.videos[:2]:
        progress_tracker.record_progress(db, _update(user, course, video.id, progress_percent=30))
    progress_tracker.record_progress(db, _update(user, other_course, other_course.videos[0].id, progress_percent=30))

    records = progress_tracker.list_course_progress(db, user.id, course.id)

    assert {record.video_id for record in records} == {video.id for video in course.videos[:2]}


def test_reset_reopens_completed_record(db, make_user, make_course):
    user = make_user()
    course = make_course(n_videos=1)
    video_id = course.videos[0].id
    progress_tracker.record_progress(db, _update(user, course, video_id, current_position=100, progress_percent=100))

    record = progress_tracker.reset_progress(db, user.id, video_id)

    assert record.status == ViewingStatus.NOT_STARTED
    assert record.progress_percent == 0
    assert record.completed_at is None
    assert certificate_crud.get_certificate_for_user_course(db, user.id, course.id) is not None


def test_reset_without_record(db, make_user):
    user = make_user()

    assert progress_tracker.reset_progress(db, user.id, 42) is None


def test_update_for_unknown_video_is_rejected(db, make_user, make_course):
    user = make_user()
    course = make_course()

    with pytest.raises(InvalidInput):
        progress_tracker.record_progress(db, _update(user, course, 99999, progress_percent=50))

    assert db.query(ViewingRecord).count() == 0


def test_update_with_another_courses_id_is_rejected(db, make_user, make_course):
    user = make_user()
    course = make_course(n_videos=1)
    other_course = make_course(title="Other", n_videos=1)
    video_id = course.videos[0].id

    with pytest.raises(InvalidInput):
        progress_tracker.record_progress(db, _update(user, other_course, video_id, progress_percent=10))
    assert db.query(ViewingRecord).count() == 0

    record = progress_tracker.record_progress(db, _update(user, course, video_id, progress_percent=100))

    assert record.course_id == course.id
    assert completion_evaluator.is_course_complete(db, user.id, course.id) is True
