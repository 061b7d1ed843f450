"""Job and pool registry reads

The registries keep their records in tables addressed as dynamic fields keyed
by u64 ids:
1. jobs table: job id -> Job struct
2. pool users table: pool id -> vector<address>
3. pool data table: pool id -> vector<vector<u8>> of data blob ids
"""

import logging
from typing import Any, Dict, List, Optional

from ..decoding import decode_text, decode_u64
from ..errors import LedgerError
from .client import SuiClient
from .models import OnChainJob

logger = logging.getLogger(__name__)

# Move enum variant names -> local status names
JOB_STATUS_VARIANTS = {
    "Pending": "PENDING",
    "Cancelled": "CANCELLED",
    "Completed": "COMPLETED",
}
JOB_STATUS_CODES = {0: "PENDING", 1: "CANCELLED", 2: "COMPLETED"}


def _field_value(data: Dict[str, Any]) -> Any:
    """Value stored in a ``dynamic_field::Field`` object"""
    content = data.get("content") or {}
    if content.get("dataType") != "moveObject":
        raise LedgerError(f"Unexpected dynamic field content: {content.get('dataType')}")
    return (content.get("fields") or {}).get("value")


def parse_job_status(value: Any) -> str:
    """Move ``JobStatus`` enum in any of its JSON renderings"""
    if isinstance(value, dict):
        if "variant" in value:
            name = value["variant"]
        else:
            name = next((k for k in value if k in JOB_STATUS_VARIANTS), None)
        if name in JOB_STATUS_VARIANTS:
            return JOB_STATUS_VARIANTS[name]
    elif isinstance(value, (int, str)) and str(value).isdigit():
        if int(value) in JOB_STATUS_CODES:
            return JOB_STATUS_CODES[int(value)]
    raise LedgerError(f"Unknown job status: {value!r}")


class Registry:
    """Read access to the job and pool registries"""

    def __init__(self, client: SuiClient, jobs_table_id: str,
                 pool_users_table_id: str, pool_data_table_id: str):
        self.client = client
        self.jobs_table_id = jobs_table_id
        self.pool_users_table_id = pool_users_table_id
        self.pool_data_table_id = pool_data_table_id

    @classmethod
    def from_settings(cls, client: SuiClient, settings) -> "Registry":
        return cls(
            client,
            jobs_table_id=settings.jobs_table_id,
            pool_users_table_id=settings.pool_users_table_id,
            pool_data_table_id=settings.pool_data_table_id,
        )

    def _table_entry(self, table_id: str, key: int) -> Optional[Any]:
        data = self.client.get_dynamic_field_object(table_id, "u64", str(key))
        if data is None:
            return None
        return _field_value(data)

    def get_job(self, job_id: int) -> Optional[OnChainJob]:
        """Fetch the full on-chain job record, ``None`` if unknown"""
        value = self._table_entry(self.jobs_table_id, job_id)
        if value is None:
            logger.warning(f"Job {job_id} not found in job registry")
            return None

        fields = value.get("fields", value) if isinstance(value, dict) else {}
        try:
            return OnChainJob(
                job_id=job_id,
                creator=fields["creator"],
                pool_id=decode_u64(fields["pool_id"], "pool_id"),
                model_config_blob_id=decode_text(fields.get("model_wid") or [], "model_wid"),
                epochs=decode_u64(fields["epochs"], "epochs"),
                learning_rate=decode_u64(fields["learning_rate"], "learning_rate"),
                price=decode_u64(fields["price"], "price"),
                status=parse_job_status(fields.get("status")),
            )
        except KeyError as e:
            raise LedgerError(f"Job {job_id} record is missing field {e}") from e

    def get_pool_contributors(self, pool_id: int) -> List[str]:
        """Accounts registered as contributors of a pool"""
        value = self._table_entry(self.pool_users_table_id, pool_id)
        if not value:
            logger.info(f"Pool {pool_id} has no contributors")
            return []
        return list(value)

    def get_pool_data_blob_ids(self, pool_id: int) -> List[str]:
        """Data blob ids contributed to a pool, in registration order"""
        value = self._table_entry(self.pool_data_table_id, pool_id)
        if not value:
            logger.info(f"Pool {pool_id} has no data blobs")
            return []
        return [decode_text(entry, "data_blob_id") for entry in value]
