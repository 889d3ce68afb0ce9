# ============================================
# FILE: chimeprov/core/__init__.py
# ============================================
"""
Core module for chimeprov - configuration, environment, errors and logging.
"""

from chimeprov.core.config import ProvisionerConfig, configure, get_config
from chimeprov.core.env import EnvManager, get_env
from chimeprov.core.exceptions import (
    ConfigurationError,
    InvalidRequestTypeError,
    PollingTimeoutError,
    ProviderCallError,
    ProvisionerError,
    ResourceAlreadySetError,
    StackNotFoundError,
    StackOutputsMissingError,
)
from chimeprov.core.logger import get_logger, set_logger

__all__ = [
    # Config
    "ProvisionerConfig",
    "configure",
    "get_config",
    "EnvManager",
    "get_env",
    # Exceptions
    "ConfigurationError",
    "InvalidRequestTypeError",
    "PollingTimeoutError",
    "ProviderCallError",
    "ProvisionerError",
    "ResourceAlreadySetError",
    "StackNotFoundError",
    "StackOutputsMissingError",
    # Logging
    "get_logger",
    "set_logger",
]
