"""Training pipeline

Drives one job through the external workflow and owns its status:

    PENDING -> IN_PROGRESS -> COMPLETED
                           -> FAILED

IN_PROGRESS is recorded before any external call so that a crash mid-way
leaves the job visibly stuck rather than silently lost. Any error marks the
job FAILED and is re-raised; nothing is retried automatically.
"""

import logging

from .. import db
from ..errors import PipelineConfigurationError
from ..compute.models import TrainingRequest

logger = logging.getLogger(__name__)


class TrainingPipeline:
    """Input resolution -> secure compute -> completion transaction"""

    def __init__(self, registry, compute, submitter):
        self.registry = registry
        self.compute = compute
        self.submitter = submitter

    def run(self, job_id: int):
        """Run the pipeline for a PENDING job

        Returns:
            the completion ``TransactionReceipt``

        Raises:
            InvalidTransitionError: the job is not PENDING
            any error from resolution, compute or submission, after the job
            has been marked FAILED
        """
        job = db.start_job(job_id)
        logger.info(f"Job {job_id} in progress (pool {job.pool_id})")

        try:
            request = self.build_request(job)
            signed = self.compute.train(request)
            logger.info(
                f"Job {job_id} trained: accuracy={signed.result.accuracy} "
                f"final_loss={signed.result.final_loss} samples={signed.result.num_samples}"
            )
            receipt = self.submitter.submit(job_id, signed)
        except Exception as e:
            logger.error(f"Job {job_id} failed: {e}")
            db.fail_job(job_id, str(e) or type(e).__name__)
            raise

        db.complete_job(job_id, receipt.digest)
        logger.info(f"Job {job_id} completed on chain ({receipt.digest})")
        return receipt

    def build_request(self, job) -> TrainingRequest:
        """Resolve on-chain inputs into a training request

        Raises:
            PipelineConfigurationError: no model config blob or no data blobs
        """
        on_chain = self.registry.get_job(job.id)
        if on_chain is None:
            raise PipelineConfigurationError(f"Job {job.id} not found in job registry")
        if not on_chain.model_config_blob_id:
            raise PipelineConfigurationError(f"Job {job.id} has no model config blob")
        db.set_model_config_blob_id(job.id, on_chain.model_config_blob_id)

        contributors = self.registry.get_pool_contributors(job.pool_id)
        data_blob_ids = self.registry.get_pool_data_blob_ids(job.pool_id)
        logger.info(
            f"Pool {job.pool_id}: {len(contributors)} contributors, "
            f"{len(data_blob_ids)} data blobs"
        )
        if not data_blob_ids:
            raise PipelineConfigurationError(f"Pool {job.pool_id} has no data blobs")

        return TrainingRequest(
            data_blob_ids=data_blob_ids,
            model_config_blob_id=on_chain.model_config_blob_id,
            key_id=job.creator,
            learning_rate=job.learning_rate,
            epochs=job.epochs,
        )
