"""Secure compute request/response models"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator


class TrainingRequest(BaseModel):
    """Training request sent to the secure compute service"""
    model_config = ConfigDict(protected_namespaces=())

    data_blob_ids: List[str] = Field(..., description="Data blobs to train on, in pool order")
    model_config_blob_id: str = Field(..., description="Model configuration blob")
    key_id: str = Field(..., description="Key material identifier (job creator)")
    learning_rate: int = Field(..., ge=0)
    epochs: int = Field(..., ge=0)


class TrainingResult(BaseModel):
    """Training outcome produced inside the secure environment"""
    model_config = ConfigDict(protected_namespaces=())

    model_blob_id: str
    accuracy: float
    final_loss: float
    num_samples: int
    model_hash: List[int]

    @field_validator("model_hash")
    @classmethod
    def validate_model_hash(cls, v):
        if any(not 0 <= b <= 255 for b in v):
            raise ValueError("model_hash must be a list of byte values")
        return v


class TimestampedResult(BaseModel):
    payload: TrainingResult
    timestamp_ms: int


class SignedTrainingResponse(BaseModel):
    """Result plus the enclave signature over ``response``

    The signature is forwarded to the ledger untouched.
    """
    response: TimestampedResult
    signature: str

    @property
    def result(self) -> TrainingResult:
        return self.response.payload

    @property
    def timestamp_ms(self) -> int:
        return self.response.timestamp_ms
