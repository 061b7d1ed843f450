"""Ledger access: queries, registry reads and the completion transaction"""
from .client import SuiClient, fullnode_client
from .complete_job import CompletionSubmitter
from .models import EventId, EventPage, OnChainJob, SuiEvent, TransactionReceipt
from .registry import Registry
from .signer import Ed25519Signer
