"""
Delete path, part two: best-effort teardown.

Order matters: the SIP rule goes first (disabled, then deleted), then the
SIP media application, then the phone number. Each step runs on its own:
a missing identifier skips that step, a provider failure is logged, and
the remaining steps still run.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum

from chimeprov.core.config import ProvisionerConfig, get_config
from chimeprov.core.exceptions import ProviderCallError
from chimeprov.core.logger import get_logger
from chimeprov.monitoring.logging import ProvisioningLogger
from chimeprov.polling import SleepFn
from chimeprov.providers.interfaces import TelephonyProvider
from chimeprov.types import ProvisionedResources, ProvisioningRequest

logger = get_logger(__name__)


class TeardownOutcome(Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class TeardownReport:
    outcomes: dict[str, TeardownOutcome] = field(default_factory=dict)

    def record(self, step: str, outcome: TeardownOutcome) -> None:
        self.outcomes[step] = outcome

    @property
    def failed_steps(self) -> list[str]:
        return [s for s, o in self.outcomes.items() if o is TeardownOutcome.FAILED]

    @property
    def succeeded(self) -> bool:
        return not self.failed_steps


class Teardown:
    """
    Deletes the resources recorded in ProvisionedResources.

    Example:
        >>> report = await Teardown(telephony).run(request, resources)
        >>> report.outcomes
        {'disable_sip_rule': <TeardownOutcome.COMPLETED: 'completed'>, ...}
    """

    def __init__(
        self,
        telephony: TelephonyProvider,
        config: ProvisionerConfig | None = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.telephony = telephony
        self.config = config or get_config()
        self._sleep = sleep
        self.steps = ProvisioningLogger("chimeprov.teardown")

    async def run(
        self, request: ProvisioningRequest, resources: ProvisionedResources
    ) -> TeardownReport:
        report = TeardownReport()

        rule_name = request.sip_rule_name or request.sma_name or resources.sip_rule_id
        await self._step(
            report,
            "disable_sip_rule",
            resources.sip_rule_id,
            lambda rid: self.telephony.update_sip_rule(rid, name=rule_name, disabled=True),
        )
        await self._step(
            report, "delete_sip_rule", resources.sip_rule_id, self.telephony.delete_sip_rule
        )
        await self._step(
            report,
            "delete_sip_media_application",
            resources.sma_id,
            self.telephony.delete_sip_media_application,
        )
        await self._step(
            report, "delete_phone_number", resources.phone_id, self._delete_phone_number
        )

        if report.succeeded:
            logger.info("Teardown complete")
        else:
            logger.warning(f"Teardown finished with failures: {report.failed_steps}")
        return report

    async def _delete_phone_number(self, phone_id: str) -> None:
        # Provider race: phone deletion right after SIP rule deletion is rejected
        if self.config.phone_delete_delay > 0:
            logger.debug(f"Waiting {self.config.phone_delete_delay}s before deleting {phone_id}")
            await self._sleep(self.config.phone_delete_delay)
        await self.telephony.delete_phone_number(phone_id)

    async def _step(
        self, report: TeardownReport, step: str, resource_id: str | None, action
    ) -> None:
        if not resource_id:
            self.steps.step_skipped(step, "no identifier recorded")
            report.record(step, TeardownOutcome.SKIPPED)
            return

        self.steps.step_started(step)
        try:
            await action(resource_id)
        except ProviderCallError as e:
            self.steps.step_failed(step, e)
            report.record(step, TeardownOutcome.FAILED)
            return

        self.steps.step_completed(step, resource_id)
        report.record(step, TeardownOutcome.COMPLETED)
