"""
Lifecycle event parsing and response building.

Request properties are validated loosely: absent values become None and
show up later as step precondition failures rather than upfront errors.
"""

from __future__ import annotations

from typing import Any

from chimeprov.core.exceptions import InvalidRequestTypeError
from chimeprov.types import (
    CustomResourceResponse,
    PhoneFilter,
    ProvisioningRequest,
    RequestType,
    ResponseStatus,
)


def parse_request_type(event: dict[str, Any]) -> RequestType:
    raw = event.get("RequestType")
    try:
        return RequestType(raw)
    except ValueError:
        raise InvalidRequestTypeError(raw) from None


def parse_phone_filter(properties: dict[str, Any]) -> PhoneFilter:
    return PhoneFilter(
        area_code=properties.get("phoneAreaCode") or None,
        city=properties.get("phoneCity") or None,
        country=properties.get("phoneCountry") or None,
        state=properties.get("phoneState") or None,
        toll_free_prefix=properties.get("phoneNumberTollFreePrefix") or None,
    )


def parse_request(event: dict[str, Any]) -> ProvisioningRequest:
    """Build the immutable request configuration from a lifecycle event."""
    properties = event.get("ResourceProperties") or {}
    return ProvisioningRequest(
        region=properties.get("region"),
        sma_name=properties.get("smaName"),
        sip_rule_name=properties.get("sipRuleName"),
        lambda_arn=properties.get("lambdaArn"),
        product_type=properties.get("phoneNumberType"),
        sip_trigger_type=properties.get("sipTriggerType"),
        phone_filter=parse_phone_filter(properties),
        stack_id=event.get("StackId"),
        request_id=event.get("RequestId"),
        logical_resource_id=event.get("LogicalResourceId"),
        physical_resource_id=event.get("PhysicalResourceId"),
    )


def success_response(
    request: ProvisioningRequest,
    data: dict[str, Any] | None = None,
    physical_resource_id: str | None = None,
) -> CustomResourceResponse:
    return CustomResourceResponse(
        status=ResponseStatus.SUCCESS,
        reason="",
        request_id=request.request_id,
        stack_id=request.stack_id,
        logical_resource_id=request.logical_resource_id,
        physical_resource_id=physical_resource_id or request.physical_resource_id,
        data=data,
    )


def failure_response(
    request: ProvisioningRequest,
    reason: str,
    data: dict[str, Any] | None = None,
    physical_resource_id: str | None = None,
) -> CustomResourceResponse:
    return CustomResourceResponse(
        status=ResponseStatus.FAILED,
        reason=reason,
        request_id=request.request_id,
        stack_id=request.stack_id,
        logical_resource_id=request.logical_resource_id,
        physical_resource_id=physical_resource_id or request.physical_resource_id,
        data=data,
    )
