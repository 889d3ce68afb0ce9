# ============================================
# FILE: chimeprov/types.py
# ============================================

"""
All type definitions, enums, and dataclasses

The invocation state is split three ways:
- ProvisioningRequest: immutable input parsed from the lifecycle event
- ProvisionedResources: write-once accumulator of derived identifiers
- Provider records (Page, PhoneNumberOrder, ...): what the providers return
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from chimeprov.core.exceptions import ResourceAlreadySetError

T = TypeVar("T")

# Placeholder reported for identifiers that were never resolved
NONE_VALUE = "none"

# Stack output keys written by the deploying stack and read back on delete
OUTPUT_SMA_ID = "smaID"
OUTPUT_SIP_RULE_ID = "sipRuleID"
OUTPUT_PHONE_ID = "phoneID"

ORDER_STATUS_SUCCESSFUL = "Successful"
PHONE_STATUS_UNASSIGNED = "Unassigned"


class RequestType(Enum):
    """CloudFormation custom resource lifecycle event type"""

    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


class ResponseStatus(Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class FailureReason:
    """Fixed reason strings reported to the deployment system"""

    CREATE_FAILED = "Custom resource failed on creation"
    DELETE_FAILED = "Custom resource failed on deletion"
    STACK_NOT_FOUND = "Stack name not found"
    UPDATE_UNSUPPORTED = "Custom resource update not yet supported"


@dataclass(frozen=True)
class PhoneFilter:
    """Search filter for available phone numbers. Empty fields are not sent."""

    area_code: str | None = None
    city: str | None = None
    country: str | None = None
    state: str | None = None
    toll_free_prefix: str | None = None

    def to_params(self) -> dict[str, str]:
        """Return the populated fields as SearchAvailablePhoneNumbers kwargs."""
        params = {
            "AreaCode": self.area_code,
            "City": self.city,
            "Country": self.country,
            "State": self.state,
            "TollFreePrefix": self.toll_free_prefix,
        }
        return {k: v for k, v in params.items() if v}


@dataclass(frozen=True)
class ProvisioningRequest:
    """Immutable request configuration for one invocation."""

    region: str | None
    sma_name: str | None
    sip_rule_name: str | None
    lambda_arn: str | None
    product_type: str | None
    sip_trigger_type: str | None
    phone_filter: PhoneFilter = field(default_factory=PhoneFilter)

    # Correlation identifiers, echoed back unchanged
    stack_id: str | None = None
    request_id: str | None = None
    logical_resource_id: str | None = None
    physical_resource_id: str | None = None


_WRITE_ONCE_FIELDS = ("phone_number", "phone_id", "order_id", "sma_id", "sip_rule_id")


@dataclass
class ProvisionedResources:
    """
    Mutable accumulator of the identifiers derived during one invocation.

    Identifier fields are write-once: assigning a second value raises
    ResourceAlreadySetError.
    """

    phone_number: str | None = None
    phone_id: str | None = None
    order_id: str | None = None
    order_ready: bool = False
    sma_id: str | None = None
    sip_rule_id: str | None = None
    stack_outputs: dict[str, str] = field(default_factory=dict)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _WRITE_ONCE_FIELDS and value is not None:
            current = getattr(self, name, None)
            if current is not None:
                raise ResourceAlreadySetError(name, current, value)
        super().__setattr__(name, value)

    def apply_stack_outputs(self, outputs: dict[str, str]) -> None:
        """Map well-known stack output keys onto the identifier fields."""
        self.stack_outputs = dict(outputs)
        mapping = {
            OUTPUT_SMA_ID: "sma_id",
            OUTPUT_SIP_RULE_ID: "sip_rule_id",
            OUTPUT_PHONE_ID: "phone_id",
        }
        for key, attr in mapping.items():
            value = outputs.get(key)
            # A partially failed create exports the "none" placeholder
            if value and value != NONE_VALUE:
                setattr(self, attr, value)

    def as_data(self) -> dict[str, str]:
        """Response Data payload, unresolved fields reported as "none"."""
        return {
            OUTPUT_SMA_ID: self.sma_id or NONE_VALUE,
            OUTPUT_SIP_RULE_ID: self.sip_rule_id or NONE_VALUE,
            OUTPUT_PHONE_ID: self.phone_id or NONE_VALUE,
            "phoneNumber": self.phone_number or NONE_VALUE,
        }


# ============================================
# Provider records
# ============================================


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a paginated list call."""

    items: list[T]
    next_token: str | None = None


@dataclass(frozen=True)
class PhoneNumberOrder:
    order_id: str
    status: str | None = None

    @property
    def is_successful(self) -> bool:
        """Status compared with every whitespace character removed."""
        if self.status is None:
            return False
        return "".join(self.status.split()) == ORDER_STATUS_SUCCESSFUL


@dataclass(frozen=True)
class PhoneNumberRecord:
    phone_number_id: str
    e164_phone_number: str
    status: str | None = None


@dataclass(frozen=True)
class StackDescription:
    stack_id: str
    stack_name: str | None = None
    outputs: dict[str, str] | None = None


@dataclass
class CustomResourceResponse:
    """Structured response returned to the deployment system."""

    status: ResponseStatus
    request_id: str | None
    stack_id: str | None
    logical_resource_id: str | None
    physical_resource_id: str | None
    reason: str = ""
    data: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        response: dict[str, Any] = {
            "Status": self.status.value,
            "Reason": self.reason,
            "LogicalResourceId": self.logical_resource_id,
            "PhysicalResourceId": self.physical_resource_id,
            "RequestId": self.request_id,
            "StackId": self.stack_id,
        }
        if self.data is not None:
            response["Data"] = self.data
        return response
