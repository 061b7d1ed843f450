"""Test doubles for the ledger, the compute service and the pipeline"""

from typing import Dict, List, Optional

from relay_engine.compute import SignedTrainingResponse
from relay_engine.errors import LedgerError
from relay_engine.ledger import EventPage, OnChainJob, SuiEvent, TransactionReceipt

PACKAGE = "0xpkg"
JOB_CREATED_TYPE = f"{PACKAGE}::jobs::JobCreated"


def make_event(seq: int, payload: Dict, event_type: str = JOB_CREATED_TYPE,
               digest: str = "digest") -> SuiEvent:
    return SuiEvent.model_validate({
        "id": {"txDigest": f"{digest}{seq}", "eventSeq": "0"},
        "type": event_type,
        "parsedJson": payload,
        "timestampMs": "1700000000000",
    })


def job_payload(job_id: int, **overrides) -> Dict:
    payload = {
        "job_id": str(job_id),
        "creator": "0xA",
        "pool_id": "3",
        "price": "1000000",
        "buyer_public_key": [1, 2, 3],
        "epochs": "10",
        "learning_rate": "100",
    }
    payload.update(overrides)
    return payload


class FakeLedger:
    """Serves a fixed event log in pages; cursor is the index of the last event"""

    def __init__(self, events: List[SuiEvent], page_size: int = 50):
        self.events = events
        self.page_size = page_size
        self.queries: List[Optional[Dict]] = []
        self.fail_next = 0

    def query_events(self, query, cursor=None, limit=None, descending=False):
        self.queries.append(cursor)
        if self.fail_next:
            self.fail_next -= 1
            raise LedgerError("rate limited", code=429)

        start = 0
        if cursor is not None:
            start = next(
                i + 1 for i, e in enumerate(self.events) if e.id.to_cursor() == cursor
            )
        size = min(limit or self.page_size, self.page_size)
        page = self.events[start:start + size]
        return EventPage(
            data=page,
            next_cursor=page[-1].id if page else None,
            has_next_page=start + size < len(self.events),
        )


class FakeRegistry:
    def __init__(self, model_config_blob_id="config-blob", contributors=None, blobs=None,
                 missing=False):
        self.model_config_blob_id = model_config_blob_id
        self.contributors = ["0xC1", "0xC2"] if contributors is None else contributors
        self.blobs = ["blob-1", "blob-2"] if blobs is None else blobs
        self.missing = missing

    def get_job(self, job_id):
        if self.missing:
            return None
        return OnChainJob(
            job_id=job_id, creator="0xA", pool_id=3,
            model_config_blob_id=self.model_config_blob_id,
            epochs=10, learning_rate=100, price=1000000, status="PENDING",
        )

    def get_pool_contributors(self, pool_id):
        return list(self.contributors)

    def get_pool_data_blob_ids(self, pool_id):
        return list(self.blobs)


def signed_response(**payload_overrides) -> SignedTrainingResponse:
    payload = {
        "model_blob_id": "model-blob",
        "accuracy": 77.9,
        "final_loss": 1.45,
        "num_samples": 1200,
        "model_hash": [0xAB, 0xCD],
    }
    payload.update(payload_overrides)
    return SignedTrainingResponse.model_validate({
        "response": {"payload": payload, "timestamp_ms": 1700000000123},
        "signature": "deadbeef",
    })


class FakeCompute:
    def __init__(self, response=None, error=None):
        self.response = response or signed_response()
        self.error = error
        self.requests = []

    def train(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response


class FakeSubmitter:
    def __init__(self, error=None, digest="0xdigest"):
        self.error = error
        self.digest = digest
        self.calls = []

    def submit(self, job_id, signed):
        self.calls.append((job_id, signed))
        if self.error is not None:
            raise self.error
        return TransactionReceipt(digest=self.digest, status="success")


class RecordingDispatcher:
    def __init__(self, error=None):
        self.submitted = []
        self.error = error

    def submit(self, job_id):
        self.submitted.append(job_id)
        if self.error is not None:
            raise self.error
