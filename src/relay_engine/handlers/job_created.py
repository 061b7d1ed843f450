"""JobCreated event handler

For each event in a batch, in order:
1. skip events of other types (the module filter returns every event)
2. decode the payload; a malformed event is logged and skipped
3. upsert the job; storage errors abort the batch so the cursor stays put
4. dispatch newly inserted jobs to the training pipeline exactly once
"""

import logging
from typing import Any, Dict, List

from pydantic import BaseModel

from .. import db
from ..decoding import decode_bytes, decode_u64
from ..errors import EventDecodeError

logger = logging.getLogger(__name__)

JOB_CREATED = "JobCreated"


class JobCreatedEvent(BaseModel):
    """Decoded ``JobCreated`` payload"""
    job_id: int
    creator: str
    pool_id: int
    price: int
    buyer_public_key: bytes
    epochs: int
    learning_rate: int

    def job_fields(self) -> Dict[str, Any]:
        return {
            "id": self.job_id,
            "creator": self.creator,
            "pool_id": self.pool_id,
            "price": self.price,
            "buyer_public_key": self.buyer_public_key,
            "epochs": self.epochs,
            "learning_rate": self.learning_rate,
        }


def decode_job_created(data: Dict[str, Any]) -> JobCreatedEvent:
    """Decode the ledger JSON of a ``JobCreated`` event

    Raises:
        EventDecodeError: a field is missing or has an unexpected shape
    """
    try:
        creator = data["creator"]
        if not isinstance(creator, str) or not creator:
            raise EventDecodeError(f"creator: expected account address, got {creator!r}")
        return JobCreatedEvent(
            job_id=decode_u64(data["job_id"], "job_id"),
            creator=creator,
            pool_id=decode_u64(data["pool_id"], "pool_id"),
            price=decode_u64(data["price"], "price"),
            buyer_public_key=decode_bytes(data["buyer_public_key"], "buyer_public_key"),
            epochs=decode_u64(data["epochs"], "epochs"),
            learning_rate=decode_u64(data["learning_rate"], "learning_rate"),
        )
    except KeyError as e:
        raise EventDecodeError(f"missing field {e}") from e


class JobCreatedHandler:
    """Turns ``JobCreated`` events into jobs and hands new ones on"""

    def __init__(self, dispatcher, event_name: str = JOB_CREATED):
        self.dispatcher = dispatcher
        self.event_name = event_name

    def __call__(self, events: List) -> None:
        for event in events:
            self.handle(event)

    def handle(self, event) -> None:
        if event.name != self.event_name:
            logger.debug(f"Skipping {event.type} event {event.id.tx_digest}:{event.id.event_seq}")
            return

        try:
            decoded = decode_job_created(event.parsed_json)
        except EventDecodeError as e:
            logger.error(
                f"Skipping malformed {self.event_name} event "
                f"{event.id.tx_digest}:{event.id.event_seq}: {e}"
            )
            return

        logger.info(
            f"Job Created event: job={decoded.job_id} creator={decoded.creator} "
            f"pool={decoded.pool_id} price={decoded.price}"
        )
        job, created = db.upsert_job(decoded.job_fields())
        if not created:
            logger.info(f"Job {decoded.job_id} already known ({job.status}), not dispatching")
            return

        logger.info(f"Job {decoded.job_id} saved to database")
        try:
            self.dispatcher.submit(decoded.job_id)
        except Exception:
            # Pipeline errors end the job, not the batch
            logger.exception(f"Training pipeline failed for job {decoded.job_id}")
