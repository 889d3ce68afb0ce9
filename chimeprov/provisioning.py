# ============================================
# FILE: chimeprov/provisioning.py
# ============================================

"""
Create path: phone number -> SIP media application -> SIP rule.

The sequence is fixed and strictly linear:

    find_phone_number          search available numbers, take the first
    order_phone_number         order that single number
    wait_for_order             poll orders until the order is "Successful"
    find_phone_number_id       poll unassigned numbers until ours shows up
    create_sip_media_application
    create_sip_rule            route the number to the SMA

Every step checks its preconditions and returns True/False. Provider errors
are logged and turn into False. A failed search is only logged; any other
False stops the sequence and leaves ProvisionedResources partially filled.
PollingTimeoutError is the one error that escapes provision().
"""

from __future__ import annotations

import asyncio
import time

from chimeprov.core.config import ProvisionerConfig, get_config
from chimeprov.core.exceptions import PollingTimeoutError, ProviderCallError
from chimeprov.core.logger import get_logger
from chimeprov.monitoring.logging import ProvisioningLogger
from chimeprov.polling import Deadline, SleepFn, poll_pages
from chimeprov.providers.interfaces import TelephonyProvider
from chimeprov.types import (
    PHONE_STATUS_UNASSIGNED,
    PhoneNumberOrder,
    PhoneNumberRecord,
    ProvisionedResources,
    ProvisioningRequest,
)

logger = get_logger(__name__)

SIP_RULE_TARGET_PRIORITY = 1


class Provisioner:
    """
    Runs the create sequence against a TelephonyProvider.

    Example:
        >>> provisioner = Provisioner(ChimeTelephonyProvider(region_name="us-east-1"))
        >>> resources = ProvisionedResources()
        >>> await provisioner.provision(request, resources)
        >>> resources.as_data()
        {'smaID': '...', 'sipRuleID': '...', 'phoneID': '...', 'phoneNumber': '+1...'}
    """

    def __init__(
        self,
        telephony: TelephonyProvider,
        config: ProvisionerConfig | None = None,
        deadline: Deadline | None = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.telephony = telephony
        self.config = config or get_config()
        self.deadline = deadline
        self._sleep = sleep
        self.steps = ProvisioningLogger("chimeprov.provisioning")

    async def provision(
        self, request: ProvisioningRequest, resources: ProvisionedResources
    ) -> bool:
        """
        Run the full create sequence.

        Returns:
            True if every step completed

        Raises:
            PollingTimeoutError: If a polling loop ran out of budget
        """
        await self.find_phone_number(request, resources)

        for step in (
            self.order_phone_number,
            self.wait_for_order,
            self.find_phone_number_id,
            self.create_sip_media_application,
            self.create_sip_rule,
        ):
            if not await step(request, resources):
                logger.warning(f"Provisioning stopped at {step.__name__}")
                return False

        return True

    async def find_phone_number(
        self, request: ProvisioningRequest, resources: ProvisionedResources
    ) -> bool:
        step = "find_phone_number"
        if resources.phone_number:
            return True

        self.steps.step_started(step)
        try:
            numbers = await self.telephony.search_available_phone_numbers(request.phone_filter)
        except ProviderCallError as e:
            self.steps.step_failed(step, e)
            return False

        if not numbers:
            self.steps.step_skipped(step, f"no numbers match {request.phone_filter.to_params()}")
            return False

        resources.phone_number = numbers[0]
        self.steps.step_completed(step, resources.phone_number)
        return True

    async def order_phone_number(
        self, request: ProvisioningRequest, resources: ProvisionedResources
    ) -> bool:
        step = "order_phone_number"
        if resources.order_id:
            return True
        if not resources.phone_number:
            self.steps.step_skipped(step, "no phone number selected")
            return False
        if not request.product_type:
            self.steps.step_skipped(step, "no phone number product type")
            return False

        self.steps.step_started(step)
        try:
            resources.order_id = await self.telephony.create_phone_number_order(
                [resources.phone_number], request.product_type
            )
        except ProviderCallError as e:
            self.steps.step_failed(step, e)
            return False

        self.steps.step_completed(step, resources.order_id)
        return True

    async def wait_for_order(
        self, request: ProvisioningRequest, resources: ProvisionedResources
    ) -> bool:
        step = "wait_for_order"
        if resources.order_ready:
            return True
        if not resources.order_id:
            self.steps.step_skipped(step, "no phone number order")
            return False

        order_id = resources.order_id

        async def fetch(token: str | None) -> tuple[PhoneNumberOrder | None, str | None]:
            page = await self.telephony.list_phone_number_orders(
                next_token=token, max_results=self.config.order_page_size
            )
            logger.debug(f"{len(page.items)} phone number orders listed")
            for order in page.items:
                if order.order_id == order_id:
                    logger.debug(f"Order {order_id} status: {order.status!r}")
                    if order.is_successful:
                        return order, page.next_token
            return None, page.next_token

        self.steps.step_started(step)
        started = time.monotonic()
        try:
            await poll_pages(
                fetch,
                operation=step,
                interval=self.config.order_poll_interval,
                max_attempts=self.config.order_poll_max_attempts,
                deadline=self.deadline,
                sleep=self._sleep,
            )
        except PollingTimeoutError as e:
            self.steps.step_failed(step, e)
            raise

        resources.order_ready = True
        self.steps.step_completed(step, order_id, _elapsed_ms(started))
        return True

    async def find_phone_number_id(
        self, request: ProvisioningRequest, resources: ProvisionedResources
    ) -> bool:
        step = "find_phone_number_id"
        if resources.phone_id:
            return True
        if not resources.order_ready or not resources.phone_number:
            self.steps.step_skipped(step, "phone number order is not complete")
            return False

        phone_number = resources.phone_number

        async def fetch(token: str | None) -> tuple[PhoneNumberRecord | None, str | None]:
            page = await self.telephony.list_phone_numbers(
                product_type=request.product_type,
                status=PHONE_STATUS_UNASSIGNED,
                next_token=token,
                max_results=self.config.phone_id_page_size,
            )
            for record in page.items:
                if record.e164_phone_number == phone_number:
                    return record, page.next_token
            return None, page.next_token

        self.steps.step_started(step)
        started = time.monotonic()
        try:
            record = await poll_pages(
                fetch,
                operation=step,
                interval=self.config.phone_id_poll_interval,
                max_attempts=self.config.phone_id_poll_max_attempts,
                deadline=self.deadline,
                sleep=self._sleep,
            )
        except PollingTimeoutError as e:
            self.steps.step_failed(step, e)
            raise

        resources.phone_id = record.phone_number_id
        self.steps.step_completed(step, resources.phone_id, _elapsed_ms(started))
        return True

    async def create_sip_media_application(
        self, request: ProvisioningRequest, resources: ProvisionedResources
    ) -> bool:
        step = "create_sip_media_application"
        if resources.sma_id:
            return True
        missing = _missing(
            sma_name=request.sma_name, region=request.region, lambda_arn=request.lambda_arn
        )
        if missing:
            self.steps.step_skipped(step, f"missing {missing}")
            return False

        self.steps.step_started(step)
        try:
            resources.sma_id = await self.telephony.create_sip_media_application(
                name=request.sma_name, region=request.region, lambda_arn=request.lambda_arn
            )
        except ProviderCallError as e:
            self.steps.step_failed(step, e)
            return False

        self.steps.step_completed(step, resources.sma_id)
        return True

    async def create_sip_rule(
        self, request: ProvisioningRequest, resources: ProvisionedResources
    ) -> bool:
        step = "create_sip_rule"
        if resources.sip_rule_id:
            return True
        missing = _missing(
            sma_id=resources.sma_id,
            phone_number=resources.phone_number,
            sip_rule_name=request.sip_rule_name,
            sip_trigger_type=request.sip_trigger_type,
            region=request.region,
        )
        if missing:
            self.steps.step_skipped(step, f"missing {missing}")
            return False

        self.steps.step_started(step)
        try:
            resources.sip_rule_id = await self.telephony.create_sip_rule(
                name=request.sip_rule_name,
                trigger_type=request.sip_trigger_type,
                trigger_value=resources.phone_number,
                sip_media_application_id=resources.sma_id,
                region=request.region,
                priority=SIP_RULE_TARGET_PRIORITY,
                disabled=False,
            )
        except ProviderCallError as e:
            self.steps.step_failed(step, e)
            return False

        self.steps.step_completed(step, resources.sip_rule_id)
        return True


def _missing(**values: str | None) -> str:
    return ", ".join(name for name, value in values.items() if not value)


def _elapsed_ms(started: float) -> float:
    return round((time.monotonic() - started) * 1000, 1)
