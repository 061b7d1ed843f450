"""Completion transaction

Builds, signs and submits the ``complete_job`` Move call that records a
training result on chain:
1. encode the result into its BCS layout
2. let the full node build the transaction bytes
3. sign with the operator key and execute, waiting for local execution
"""

import logging
from typing import Any, List

from ..compute.models import SignedTrainingResponse
from ..errors import EncodingError, SubmissionError
from .bcs import encode_training_result
from .client import SuiClient
from .models import TransactionReceipt
from .signer import Ed25519Signer

logger = logging.getLogger(__name__)

COMPLETE_JOB_FUNCTION = "complete_job"
EXECUTE_OPTIONS = {"showEffects": True, "showObjectChanges": True}


def signature_bytes(signature: str) -> bytes:
    """Enclave signature as raw bytes (hex on the wire)"""
    try:
        return bytes.fromhex(signature[2:] if signature.startswith("0x") else signature)
    except ValueError as e:
        raise EncodingError("Enclave signature is not hex") from e


class CompletionSubmitter:
    """Submits ``complete_job`` transactions on behalf of the operator"""

    def __init__(self, client: SuiClient, signer: Ed25519Signer, package_id: str, module: str,
                 admin_cap_id: str, job_registry_id: str, pool_registry_id: str,
                 enclave_id: str, gas_budget: int, blob_id_encoding: str = "utf8"):
        self.client = client
        self.signer = signer
        self.package_id = package_id
        self.module = module
        self.admin_cap_id = admin_cap_id
        self.job_registry_id = job_registry_id
        self.pool_registry_id = pool_registry_id
        self.enclave_id = enclave_id
        self.gas_budget = gas_budget
        self.blob_id_encoding = blob_id_encoding

    @classmethod
    def from_settings(cls, client: SuiClient, signer: Ed25519Signer, settings) -> "CompletionSubmitter":
        return cls(
            client,
            signer,
            package_id=settings.package_id,
            module=settings.module,
            admin_cap_id=settings.admin_cap_id,
            job_registry_id=settings.job_registry_id,
            pool_registry_id=settings.pool_registry_id,
            enclave_id=settings.enclave_id,
            gas_budget=settings.gas_budget,
            blob_id_encoding=settings.model_blob_id_encoding,
        )

    def build_arguments(self, job_id: int, signed: SignedTrainingResponse) -> List[Any]:
        """Move call arguments in ``complete_job`` parameter order"""
        result_bytes = encode_training_result(signed.result, self.blob_id_encoding)
        return [
            self.admin_cap_id,
            self.job_registry_id,
            self.pool_registry_id,
            self.enclave_id,
            str(signed.timestamp_ms),
            list(result_bytes),
            list(signature_bytes(signed.signature)),
            str(job_id),
        ]

    def submit(self, job_id: int, signed: SignedTrainingResponse) -> TransactionReceipt:
        """Sign and execute the completion transaction

        Raises:
            EncodingError: the result does not fit the on-chain layout
            LedgerError: the node could not be reached or refused to build
            SubmissionError: the transaction executed with a failure status
        """
        arguments = self.build_arguments(job_id, signed)
        tx_bytes = self.client.unsafe_move_call(
            self.signer.address,
            self.package_id,
            self.module,
            COMPLETE_JOB_FUNCTION,
            [],
            arguments,
            gas_budget=self.gas_budget,
        )
        signature = self.signer.sign_transaction(tx_bytes)
        result = self.client.execute_transaction_block(
            tx_bytes, [signature], EXECUTE_OPTIONS, "WaitForLocalExecution",
        ) or {}

        digest = result.get("digest", "")
        status_info = (result.get("effects") or {}).get("status") or {}
        status = status_info.get("status", "unknown")
        logger.info(f"complete_job for job {job_id}: digest={digest} status={status}")

        if status != "success":
            raise SubmissionError(
                f"complete_job for job {job_id} was rejected: {status_info.get('error', status)}",
                digest=digest,
                status=status,
            )
        return TransactionReceipt(digest=digest, status=status)
