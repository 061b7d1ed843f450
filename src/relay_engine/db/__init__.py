"""Database module"""
from .models import (
    Cursor, Job, db,
    PENDING, IN_PROGRESS, COMPLETED, FAILED, CANCELLED, JOB_STATUSES,
)
from .operations import (
    init_db,
    get_cursor,
    save_cursor,
    list_cursors,
    reset_cursors,
    upsert_job,
    get_job,
    list_jobs,
    start_job,
    set_model_config_blob_id,
    complete_job,
    fail_job,
)
