"""Database operations

Cursor store and job store used by the poller, the ingestion handler and the
training pipeline. Every function opens its own ``db_session`` so each call is
one transaction.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from pony.orm import TransactionIntegrityError, db_session, select

from ..errors import InvalidTransitionError, JobNotFoundError
from .models import (
    COMPLETED, FAILED, IN_PROGRESS, PENDING,
    Cursor, Job, db,
)

logger = logging.getLogger(__name__)

# Forward-only status path
TRANSITIONS = {
    PENDING: (IN_PROGRESS,),
    IN_PROGRESS: (COMPLETED, FAILED),
}


def init_db(provider="sqlite", **kwargs):
    """Bind the database and create tables

    The Pony database object can only be bound once per process, later calls
    are ignored.
    """
    if db.provider is not None:
        return
    if provider == "sqlite":
        kwargs.setdefault("filename", "relay_engine.sqlite")
        if kwargs["filename"] != ":memory:":
            kwargs.setdefault("create_db", True)
    db.bind(provider=provider, **kwargs)
    db.generate_mapping(create_tables=True)


# ===================== Cursor store =====================

@db_session
def get_cursor(event_type: str) -> Optional[Dict[str, str]]:
    """Saved position for an event type, ``None`` means from genesis"""
    cursor = Cursor.get(event_type=event_type)
    if cursor is None:
        return None
    return {"txDigest": cursor.tx_digest, "eventSeq": cursor.event_seq}


@db_session
def save_cursor(event_type: str, position: Dict[str, str]) -> None:
    """Upsert the position for an event type"""
    cursor = Cursor.get(event_type=event_type)
    if cursor is None:
        Cursor(
            event_type=event_type,
            tx_digest=position["txDigest"],
            event_seq=str(position["eventSeq"]),
        )
    else:
        cursor.tx_digest = position["txDigest"]
        cursor.event_seq = str(position["eventSeq"])
        cursor.updated_at = datetime.utcnow()


@db_session
def list_cursors() -> List[Dict[str, Any]]:
    return [c.to_dict() for c in select(c for c in Cursor).order_by(Cursor.event_type)]


@db_session
def reset_cursors() -> int:
    """Delete every cursor so all event types replay from genesis

    Returns:
        number of deleted cursors
    """
    cursors = select(c for c in Cursor)[:]
    for cursor in cursors:
        cursor.delete()
    return len(cursors)


# ===================== Job store =====================

def upsert_job(fields: Dict[str, Any]) -> Tuple[Job, bool]:
    """Insert a job unless its id is already known

    An existing row is returned untouched so replayed events never overwrite
    the state of a job that is already in progress or finished.

    Args:
        fields: decoded job fields (id, creator, pool_id, price,
            buyer_public_key, epochs, learning_rate)

    Returns:
        (job, created) where ``created`` is True only for a new id
    """
    try:
        with db_session:
            existing = Job.get(id=fields["id"])
            if existing is not None:
                return existing, False
            job = Job(
                id=fields["id"],
                creator=fields["creator"],
                pool_id=fields["pool_id"],
                price=Decimal(fields["price"]),
                buyer_public_key=fields["buyer_public_key"],
                epochs=fields["epochs"],
                learning_rate=fields["learning_rate"],
                status=PENDING,
            )
        return job, True
    except TransactionIntegrityError:
        # Another writer inserted the same id between our read and commit
        logger.info(f"Job {fields['id']} inserted concurrently, keeping existing row")
        return get_job(fields["id"]), False


@db_session
def get_job(job_id: int) -> Optional[Job]:
    return Job.get(id=job_id)


@db_session
def list_jobs(status=None) -> List[Job]:
    query = select(j for j in Job)
    if status:
        query = query.filter(lambda j: j.status == status)
    return query.order_by(Job.id)[:]


def _transition(job: Job, status: str) -> None:
    if status not in TRANSITIONS.get(job.status, ()):
        raise InvalidTransitionError(
            f"Job {job.id} cannot move from {job.status} to {status}"
        )
    job.status = status
    job.updated_at = datetime.utcnow()


def _load(job_id: int) -> Job:
    job = Job.get(id=job_id)
    if job is None:
        raise JobNotFoundError(f"Job {job_id} not found")
    return job


@db_session
def start_job(job_id: int) -> Job:
    """PENDING -> IN_PROGRESS"""
    job = _load(job_id)
    _transition(job, IN_PROGRESS)
    job.started_at = datetime.utcnow()
    return job


@db_session
def set_model_config_blob_id(job_id: int, blob_id: str) -> None:
    job = _load(job_id)
    job.model_config_blob_id = blob_id
    job.updated_at = datetime.utcnow()


@db_session
def complete_job(job_id: int, tx_digest: str) -> Job:
    """IN_PROGRESS -> COMPLETED"""
    job = _load(job_id)
    _transition(job, COMPLETED)
    job.tx_digest = tx_digest
    job.completed_at = datetime.utcnow()
    return job


@db_session
def fail_job(job_id: int, error_message: str) -> Job:
    """IN_PROGRESS -> FAILED"""
    job = _load(job_id)
    _transition(job, FAILED)
    job.error_message = error_message
    job.completed_at = datetime.utcnow()
    return job
