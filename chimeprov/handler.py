# ============================================
# FILE: chimeprov/handler.py
# ============================================

"""
Lifecycle event dispatch and the Lambda entry point.

    Create -> provision, SUCCESS with the four identifiers ("none" when unresolved)
    Delete -> discover from stack outputs, then tear down
    Update -> always FAILED, in-place updates are not supported

Usage (Lambda):
    Handler: chimeprov.handler.handler

Usage (tests / local):
    >>> response = await handle_event(event, telephony, stacks, config)
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

from chimeprov.core.config import ProvisionerConfig, get_config
from chimeprov.core.logger import get_logger
from chimeprov.discovery import StackDiscovery
from chimeprov.events import failure_response, parse_request, parse_request_type, success_response
from chimeprov.monitoring.logging import clear_request_context, set_request_context, setup_logging
from chimeprov.polling import Deadline, SleepFn
from chimeprov.provisioning import Provisioner
from chimeprov.providers.chime import ChimeTelephonyProvider
from chimeprov.providers.cloudformation import CloudFormationStackProvider
from chimeprov.providers.interfaces import StackProvider, TelephonyProvider
from chimeprov.teardown import Teardown
from chimeprov.types import (
    CustomResourceResponse,
    FailureReason,
    ProvisionedResources,
    ProvisioningRequest,
    RequestType,
)

logger = get_logger(__name__)


async def handle_event(
    event: dict[str, Any],
    telephony: TelephonyProvider,
    stacks: StackProvider,
    config: ProvisionerConfig | None = None,
    deadline: Deadline | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> dict[str, Any]:
    """
    Dispatch one lifecycle event and return the custom resource response.

    Raises:
        InvalidRequestTypeError: If RequestType is not Create/Update/Delete
    """
    config = config or get_config()
    request_type = parse_request_type(event)
    request = parse_request(event)

    set_request_context(
        request_id=request.request_id,
        stack_id=request.stack_id,
        logical_resource_id=request.logical_resource_id,
        request_type=request_type.value,
    )
    try:
        logger.info(f"{request_type.value} request received")
        logger.debug(f"event: {json.dumps(event, default=str)}")

        if request_type is RequestType.CREATE:
            response = await on_create(request, telephony, config, deadline, sleep)
        elif request_type is RequestType.DELETE:
            response = await on_delete(request, telephony, stacks, config, deadline, sleep)
        else:
            response = on_update(request)

        logger.info(f"Responding {response.status.value} {response.reason}".rstrip())
        return response.to_dict()
    finally:
        clear_request_context()


async def on_create(
    request: ProvisioningRequest,
    telephony: TelephonyProvider,
    config: ProvisionerConfig,
    deadline: Deadline | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> CustomResourceResponse:
    resources = ProvisionedResources()
    provisioner = Provisioner(telephony, config, deadline=deadline, sleep=sleep)

    try:
        completed = await provisioner.provision(request, resources)
    except Exception:
        logger.exception("Provisioning failed")
        return failure_response(
            request,
            FailureReason.CREATE_FAILED,
            data=resources.as_data(),
            physical_resource_id=config.physical_resource_id,
        )

    if not completed:
        logger.warning(f"Provisioning incomplete: {resources.as_data()}")
    return success_response(
        request, data=resources.as_data(), physical_resource_id=config.physical_resource_id
    )


async def on_delete(
    request: ProvisioningRequest,
    telephony: TelephonyProvider,
    stacks: StackProvider,
    config: ProvisionerConfig,
    deadline: Deadline | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> CustomResourceResponse:
    resources = ProvisionedResources()
    discovery = StackDiscovery(stacks, config, deadline=deadline, sleep=sleep)

    if not await discovery.discover(request.stack_id, resources):
        return failure_response(
            request, FailureReason.STACK_NOT_FOUND, data=resources.as_data()
        )

    try:
        await Teardown(telephony, config, sleep=sleep).run(request, resources)
    except Exception:
        logger.exception("Teardown failed")
        return failure_response(request, FailureReason.DELETE_FAILED, data=resources.as_data())

    return success_response(request)


def on_update(request: ProvisioningRequest) -> CustomResourceResponse:
    return failure_response(request, FailureReason.UPDATE_UNSUPPORTED, data={})


async def _run(event: dict[str, Any], config: ProvisionerConfig, deadline: Deadline) -> dict:
    region = (event.get("ResourceProperties") or {}).get("region")
    async with ChimeTelephonyProvider(
        region_name=region, service_name=config.chime_service_name
    ) as telephony, CloudFormationStackProvider(region_name=region) as stacks:
        return await handle_event(event, telephony, stacks, config, deadline)


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """AWS Lambda entry point."""
    config = ProvisionerConfig.from_env()
    setup_logging(config.log_level, config.json_logs)
    deadline = Deadline.from_lambda_context(context, config.deadline_margin)
    logger.debug(f"Deadline: {deadline}")
    return asyncio.run(_run(event, config, deadline))
