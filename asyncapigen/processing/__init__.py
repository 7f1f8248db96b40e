"""Document-building stages fed by discovery results."""

from .base import ProcessingReport, ProcessingService, merge_bindings
from .messages import MessageProcessingService
from .operations import OperationProcessingService, channel_identity, sanitize_channel_id
from .security import FALLBACK_SCHEME, KEY_STRATEGIES, SecurityProcessingService, synthesize_scheme
from .servers import ServerBindingService

__all__ = [
    "FALLBACK_SCHEME",
    "KEY_STRATEGIES",
    "MessageProcessingService",
    "OperationProcessingService",
    "ProcessingReport",
    "ProcessingService",
    "SecurityProcessingService",
    "ServerBindingService",
    "channel_identity",
    "merge_bindings",
    "sanitize_channel_id",
    "synthesize_scheme",
]
