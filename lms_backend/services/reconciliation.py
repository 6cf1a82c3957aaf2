"""
Reconciliation sweep: finds learners who finished a course but never got a
certificate, and issues one.

Each course is an independent unit of work with its own session, so courses
can be processed in parallel. The sweep only ever adds certificates; running
it again on unchanged data issues nothing.

Run from the command line with:
    python -m lms_backend.services.reconciliation
"""
import logging
import sys
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Optional, Set

from sqlalchemy.orm import Session

from lms_backend.core.config import settings
from lms_backend.core.database import SessionLocal
from lms_backend.core.exceptions import PipelineError
from lms_backend.crud import catalog_crud, viewing_record_crud
from lms_backend.models.enums import ViewingStatus
from lms_backend.schemas.admin_schema import CourseSweepFailure, CourseSweepResult, SweepReport, UserIssueError
from lms_backend.services import certificate_issuer
from lms_backend.services.completion_evaluator import evaluate_completion

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


def sweep_course(db: Session, course_id: int) -> Optional[CourseSweepResult]:
    """
    Issues missing certificates for one course. Returns None when the course has
    no active videos (nothing can be completed).
    """
    required = {video.video_id for video in catalog_crud.list_active_videos(db, course_id)}
    if not required:
        logger.info(f"Course {course_id} has no active videos; skipping.")
        return None

    completed_by_user: Dict[int, Set[int]] = defaultdict(set)
    enrolled: Set[int] = set()
    for record in viewing_record_crud.get_records_for_course(db, course_id):
        enrolled.add(record.user_id)
        if record.status == ViewingStatus.COMPLETED:
            completed_by_user[record.user_id].add(record.video_id)

    result = CourseSweepResult(course_id=course_id, required_videos=len(required), enrolled_users=len(enrolled))

    for user_id in sorted(enrolled):
        if not evaluate_completion(required, completed_by_user.get(user_id, ())):
            result.incomplete_users += 1
            continue
        try:
            outcome = certificate_issuer.issue_certificate(db, user_id, course_id)
        except PipelineError as e:
            logger.warning(f"Could not issue certificate for user {user_id} in course {course_id}: {e}")
            result.user_errors.append(UserIssueError(user_id=user_id, error=str(e)))
            continue
        if outcome.created:
            logger.info(f"Issued missing certificate {outcome.certificate_id} to user {user_id} for course {course_id}.")
            result.issued += 1
        else:
            result.already_issued += 1

    logger.info(
        f"Course {course_id}: {len(required)} videos, {len(enrolled)} learners, "
        f"{result.issued} issued, {result.already_issued} already issued, {result.incomplete_users} incomplete."
    )
    return result


def _run_course(session_factory: SessionFactory, course_id: int):
    db = session_factory()
    try:
        return sweep_course(db, course_id)
    except Exception as e:
        logger.error(f"Reconciliation failed for course {course_id}: {e}", exc_info=True)
        return CourseSweepFailure(course_id=course_id, error=str(e))
    finally:
        db.close()


def run_reconciliation_sweep(session_factory: SessionFactory = SessionLocal, max_workers: Optional[int] = None) -> SweepReport:
    """
    Scans every course with an active video and issues the certificates the live path missed.
    Per-course failures are listed in the report; they never stop the sweep.
    """
    workers = max_workers or settings.SWEEP_MAX_WORKERS

    db = session_factory()
    try:
        course_ids = catalog_crud.list_course_ids(db)
    finally:
        db.close()
    logger.info(f"Starting reconciliation sweep over {len(course_ids)} courses with {workers} workers.")

    if workers <= 1:
        outcomes = [_run_course(session_factory, course_id) for course_id in course_ids]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            outcomes = list(executor.map(lambda course_id: _run_course(session_factory, course_id), course_ids))

    report = SweepReport()
    for outcome in outcomes:
        if outcome is None:
            report.courses_skipped += 1
        elif isinstance(outcome, CourseSweepFailure):
            report.failures.append(outcome)
        else:
            report.add_course(outcome)

    logger.info(
        f"Reconciliation sweep finished: {report.issued} issued, {report.already_issued} already issued, "
        f"{report.incomplete_users} incomplete, {len(report.failures)} course failures."
    )
    return report


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    sweep_report = run_reconciliation_sweep()
    print(f"Newly issued: {sweep_report.issued}")
    print(f"Already issued: {sweep_report.already_issued}")
    print(f"Course not completed: {sweep_report.incomplete_users} learners")
    for failure in sweep_report.failures:
        print(f"Course {failure.course_id} failed: {failure.error}")
    sys.exit(1 if sweep_report.has_failures else 0)
