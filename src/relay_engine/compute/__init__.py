"""Secure compute service"""
from .client import ComputeClient
from .models import (
    SignedTrainingResponse,
    TimestampedResult,
    TrainingRequest,
    TrainingResult,
)
