"""
Monitoring and observability for chimeprov.
"""

from chimeprov.monitoring.logging import (
    ProvisionerJsonFormatter,
    ProvisioningLogger,
    RequestContextFilter,
    clear_request_context,
    set_request_context,
    setup_logging,
)

__all__ = [
    "ProvisionerJsonFormatter",
    "ProvisioningLogger",
    "RequestContextFilter",
    "clear_request_context",
    "set_request_context",
    "setup_logging",
]
