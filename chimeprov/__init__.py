# ============================================
# FILE: chimeprov/__init__.py
# ============================================

"""
chimeprov - Amazon Chime SIP media application provisioner

A CloudFormation custom resource that converges three Chime resources on
stack Create/Delete:
- A phone number (searched, ordered and resolved to its ID)
- A SIP media application with one Lambda endpoint
- A SIP rule routing the number to the SIP media application

Usage (Lambda handler):
    Handler: chimeprov.handler.handler

Usage (programmatic):
    >>> from chimeprov import handle_event, ProvisionerConfig
    >>> from chimeprov.providers import ChimeTelephonyProvider, CloudFormationStackProvider
    >>>
    >>> async with ChimeTelephonyProvider(region_name="us-east-1") as telephony, \\
    ...         CloudFormationStackProvider(region_name="us-east-1") as stacks:
    ...     response = await handle_event(event, telephony, stacks, ProvisionerConfig())
"""

from chimeprov.core.config import ProvisionerConfig, configure, get_config
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
from chimeprov.discovery import StackDiscovery
from chimeprov.handler import handle_event, handler
from chimeprov.polling import Deadline, poll_pages
from chimeprov.provisioning import Provisioner
from chimeprov.teardown import Teardown, TeardownOutcome, TeardownReport
from chimeprov.types import (
    CustomResourceResponse,
    FailureReason,
    PhoneFilter,
    ProvisionedResources,
    ProvisioningRequest,
    RequestType,
    ResponseStatus,
)

__version__ = "0.1.0"

__all__ = [
    # Config
    "ProvisionerConfig",
    "configure",
    "get_config",
    # Entry points
    "handle_event",
    "handler",
    # Sequences
    "Provisioner",
    "StackDiscovery",
    "Teardown",
    "TeardownOutcome",
    "TeardownReport",
    # Polling
    "Deadline",
    "poll_pages",
    # Types
    "CustomResourceResponse",
    "FailureReason",
    "PhoneFilter",
    "ProvisionedResources",
    "ProvisioningRequest",
    "RequestType",
    "ResponseStatus",
    # Exceptions
    "ConfigurationError",
    "InvalidRequestTypeError",
    "PollingTimeoutError",
    "ProviderCallError",
    "ProvisionerError",
    "ResourceAlreadySetError",
    "StackNotFoundError",
    "StackOutputsMissingError",
]
