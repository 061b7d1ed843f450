import json

import httpx
import pytest

from relay_engine.compute import ComputeClient, TrainingRequest
from relay_engine.errors import ComputeServiceError

REQUEST = TrainingRequest(
    data_blob_ids=["blob-1", "blob-2"],
    model_config_blob_id="config-blob",
    key_id="0xA",
    learning_rate=100,
    epochs=10,
)

RESPONSE = {
    "response": {
        "intent": 0,
        "timestamp_ms": 1700000000123,
        "data": None,
        "payload": {
            "model_blob_id": "model-blob",
            "accuracy": 77.9,
            "final_loss": 1.45,
            "num_samples": 1200,
            "model_hash": [171, 205],
        },
    },
    "signature": "deadbeef",
}


def _client(handler):
    return ComputeClient("http://enclave.test/", transport=httpx.MockTransport(handler))


def test_train_posts_payload():
    seen = []

    def handler(request):
        seen.append((request.method, str(request.url), json.loads(request.content)))
        return httpx.Response(200, json=RESPONSE)

    signed = _client(handler).train(REQUEST)

    assert seen == [("POST", "http://enclave.test/process_data", {"payload": {
        "data_blob_ids": ["blob-1", "blob-2"],
        "model_config_blob_id": "config-blob",
        "key_id": "0xA",
        "learning_rate": 100,
        "epochs": 10,
    }})]
    assert signed.signature == "deadbeef"
    assert signed.timestamp_ms == 1700000000123
    assert signed.result.model_blob_id == "model-blob"
    assert signed.result.model_hash == [171, 205]


def test_error_status():
    client = _client(lambda request: httpx.Response(500, text="enclave panicked"))
    with pytest.raises(ComputeServiceError, match="500"):
        client.train(REQUEST)


def test_unreachable():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    with pytest.raises(ComputeServiceError, match="unreachable"):
        _client(handler).train(REQUEST)


@pytest.mark.parametrize("body", [
    {"signature": "deadbeef"},
    {"response": {"timestamp_ms": 1, "payload": {"model_blob_id": "m"}}, "signature": "00"},
])
def test_malformed_response(body):
    client = _client(lambda request: httpx.Response(200, json=body))
    with pytest.raises(ComputeServiceError, match="Invalid"):
        client.train(REQUEST)


def test_non_json_response():
    client = _client(lambda request: httpx.Response(200, text="ok"))
    with pytest.raises(ComputeServiceError):
        client.train(REQUEST)
