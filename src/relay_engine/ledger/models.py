"""Ledger wire models"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class EventId(BaseModel):
    """Event position, also used as the pagination cursor"""
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    tx_digest: str = Field(..., alias="txDigest", description="Transaction digest")
    event_seq: str = Field(..., alias="eventSeq", description="Event sequence within the transaction")

    def to_cursor(self) -> Dict[str, str]:
        return {"txDigest": self.tx_digest, "eventSeq": self.event_seq}


class SuiEvent(BaseModel):
    """Event emitted by a Move module"""
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: EventId
    type: str = Field(..., description="Fully qualified event struct type")
    sender: Optional[str] = None
    parsed_json: Dict[str, Any] = Field(default_factory=dict, alias="parsedJson")
    timestamp_ms: Optional[str] = Field(None, alias="timestampMs")

    @property
    def name(self) -> str:
        """Struct name without the package and module prefix"""
        return self.type.split("<", 1)[0].rsplit("::", 1)[-1]


class EventPage(BaseModel):
    """One page of ``suix_queryEvents``"""
    model_config = ConfigDict(populate_by_name=True)

    data: List[SuiEvent] = Field(default_factory=list)
    next_cursor: Optional[EventId] = Field(None, alias="nextCursor")
    has_next_page: bool = Field(False, alias="hasNextPage")


class OnChainJob(BaseModel):
    """Job record as stored in the job registry table"""
    model_config = ConfigDict(protected_namespaces=())

    job_id: int
    creator: str
    pool_id: int
    model_config_blob_id: str = ""
    epochs: int
    learning_rate: int
    price: int
    status: str


class TransactionReceipt(BaseModel):
    digest: str
    status: str
    error: Optional[str] = None
