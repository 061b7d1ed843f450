"""Database entities"""
from datetime import datetime
from decimal import Decimal
from pony.orm import Database, PrimaryKey, Required, Optional

db = Database()

# Job status values
PENDING = "PENDING"
IN_PROGRESS = "IN_PROGRESS"
COMPLETED = "COMPLETED"
FAILED = "FAILED"
CANCELLED = "CANCELLED"

JOB_STATUSES = (PENDING, IN_PROGRESS, COMPLETED, FAILED, CANCELLED)


class Cursor(db.Entity):
    """Last handled position of one tracked event type"""
    _table_ = "cursors"

    event_type = PrimaryKey(str)
    tx_digest = Required(str)
    event_seq = Required(str)
    updated_at = Required(datetime, default=lambda: datetime.utcnow())

    def to_dict(self):
        return {
            "event_type": self.event_type,
            "tx_digest": self.tx_digest,
            "event_seq": self.event_seq,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class Job(db.Entity):
    """Compute request observed on chain"""
    _table_ = "jobs"

    id = PrimaryKey(int, size=64)  # ledger-assigned job id
    creator = Required(str)
    pool_id = Required(int, size=64)
    price = Required(Decimal, precision=21, scale=1)  # u64, smallest currency unit
    buyer_public_key = Optional(bytes)
    epochs = Required(int, size=64)
    learning_rate = Required(int, size=64)
    status = Required(str, default=PENDING)
    model_config_blob_id = Optional(str, nullable=True)

    # Bookkeeping
    error_message = Optional(str, nullable=True)
    tx_digest = Optional(str, nullable=True)  # completion transaction
    created_at = Required(datetime, default=lambda: datetime.utcnow())
    updated_at = Required(datetime, default=lambda: datetime.utcnow())
    started_at = Optional(datetime)
    completed_at = Optional(datetime)

    def to_dict(self):
        return {
            "id": self.id,
            "creator": self.creator,
            "pool_id": self.pool_id,
            "price": int(self.price),
            "buyer_public_key": self.buyer_public_key.hex() if self.buyer_public_key else "",
            "epochs": self.epochs,
            "learning_rate": self.learning_rate,
            "status": self.status,
            "model_config_blob_id": self.model_config_blob_id,
            "error_message": self.error_message,
            "tx_digest": self.tx_digest,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
