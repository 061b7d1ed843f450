"""Exception hierarchy

Errors are grouped by the collaborator that produced them so that the poller
and the pipeline can tell transient infrastructure faults apart from
configuration and decoding problems.
"""


class RelayError(Exception):
    """Base class for relay engine errors"""
    pass


class LedgerError(RelayError):
    """Ledger RPC call failed (transport, rate limiting or RPC error)"""

    def __init__(self, message, code=None):
        super().__init__(message)
        self.code = code


class SubmissionError(LedgerError):
    """Completion transaction was rejected by the ledger"""

    def __init__(self, message, digest=None, status=None):
        super().__init__(message)
        self.digest = digest
        self.status = status


class ComputeServiceError(RelayError):
    """Secure compute service call failed"""
    pass


class EventDecodeError(RelayError):
    """Ledger event payload could not be decoded"""
    pass


class EncodingError(RelayError):
    """Training result does not fit the on-chain layout"""
    pass


class PipelineConfigurationError(RelayError):
    """Job inputs are missing; retrying would not help"""
    pass


class InvalidTransitionError(RelayError):
    """Job status change outside PENDING -> IN_PROGRESS -> COMPLETED|FAILED"""
    pass


class JobNotFoundError(RelayError):
    """Job does not exist locally or on chain"""
    pass
