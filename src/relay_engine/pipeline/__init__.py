"""Training pipeline and its dispatchers"""
from .dispatch import InlineDispatcher, QueueDispatcher, create_dispatcher
from .training import TrainingPipeline
