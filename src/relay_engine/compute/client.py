"""Secure compute service client"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ..errors import ComputeServiceError
from .models import SignedTrainingResponse, TrainingRequest

logger = logging.getLogger(__name__)


class ComputeClient:
    """Calls ``POST /process_data`` on the secure compute service"""

    def __init__(self, url: str, timeout: Optional[float] = None,
                 transport: Optional[httpx.BaseTransport] = None):
        self.url = url.rstrip("/")
        self._http = httpx.Client(timeout=httpx.Timeout(timeout), transport=transport)

    def close(self) -> None:
        self._http.close()

    def train(self, request: TrainingRequest) -> SignedTrainingResponse:
        """Run one training request

        Raises:
            ComputeServiceError: transport failure, error status or a response
                that does not match the expected shape
        """
        logger.info(
            f"Requesting training on {len(request.data_blob_ids)} data blobs "
            f"(epochs={request.epochs}, learning_rate={request.learning_rate})"
        )
        try:
            response = self._http.post(
                f"{self.url}/process_data",
                json={"payload": request.model_dump()},
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            return SignedTrainingResponse.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            raise ComputeServiceError(
                f"Compute service returned {e.response.status_code}: {e.response.text[:300]}"
            ) from e
        except httpx.HTTPError as e:
            raise ComputeServiceError(f"Compute service unreachable: {e}") from e
        except (ValueError, ValidationError) as e:
            raise ComputeServiceError(f"Invalid compute service response: {e}") from e
