# This file makes the 'crud' directory a Python package.

from .user_crud import (
    DisplayIdentity,
    get_user_by_id,
    get_user_by_firebase_uid,
    get_display_identity
)

from .catalog_crud import (
    ActiveVideo,
    list_active_videos, get_video, get_course, get_course_title, list_course_ids
)

from .viewing_record_crud import (
    get_viewing_record, insert_viewing_record, save_viewing_record,
    get_records_for_user_course, get_completed_records_for_user_course, get_completed_video_ids,
    get_records_for_course, reset_viewing_record
)

from .certificate_crud import (
    insert_certificate, get_certificate_by_id, get_certificate_for_user_course,
    get_certificates_for_user, get_certificates_for_course, update_certificate_active
)


__all__ = [
    # User CRUD
    "DisplayIdentity", "get_user_by_id", "get_user_by_firebase_uid", "get_display_identity",

    # Catalog CRUD
    "ActiveVideo", "list_active_videos", "get_video", "get_course", "get_course_title", "list_course_ids",

    # Viewing Record CRUD
    "get_viewing_record", "insert_viewing_record", "save_viewing_record",
    "get_records_for_user_course", "get_completed_records_for_user_course", "get_completed_video_ids",
    "get_records_for_course", "reset_viewing_record",

    # Certificate CRUD
    "insert_certificate", "get_certificate_by_id", "get_certificate_for_user_course",
    "get_certificates_for_user", "get_certificates_for_course", "update_certificate_active",
]
