"""Core infrastructure components for dslgen."""

from .config import Config, get_config
from .exceptions import (
    ClassFileError,
    DescriptorError,
    DslGenError,
    SupertypeCycleError,
    UnresolvedSupertypeError,
)
from .logging import get_logger, log_stage, setup_logging
from .types import ServiceResult

__all__ = [
    "Config",
    "get_config",
    "ClassFileError",
    "DescriptorError",
    "DslGenError",
    "SupertypeCycleError",
    "UnresolvedSupertypeError",
    "get_logger",
    "log_stage",
    "setup_logging",
    "ServiceResult",
]
