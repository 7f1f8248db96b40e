"""AsyncAPI 3.0 document emitter for annotated API descriptions."""

from .config import EmitterConfig, load_config
from .discovery import DiscoveryService
from .document import DocumentBuilder
from .errors import EmitterError, ErrorCategory
from .loader import build_program, load_program
from .orchestrator import EmissionOutcome, Orchestrator
from .plugins import BindingKind, ProtocolPlugin, ProtocolPluginRegistry, create_default_registry
from .program import Program, StateKey
from .validators import ValidationResult, ValidationService

__version__ = "0.1.0"

__all__ = [
    "BindingKind",
    "DiscoveryService",
    "DocumentBuilder",
    "EmissionOutcome",
    "EmitterConfig",
    "EmitterError",
    "ErrorCategory",
    "Orchestrator",
    "Program",
    "ProtocolPlugin",
    "ProtocolPluginRegistry",
    "StateKey",
    "ValidationResult",
    "ValidationService",
    "__version__",
    "build_program",
    "create_default_registry",
    "load_config",
    "load_program",
]
