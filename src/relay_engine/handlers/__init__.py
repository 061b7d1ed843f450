"""Ledger event handlers"""
from .job_created import (
    JOB_CREATED,
    JobCreatedEvent,
    JobCreatedHandler,
    decode_job_created,
)
