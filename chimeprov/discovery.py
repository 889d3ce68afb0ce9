"""
Delete path, part one: recover resource identifiers from stack outputs.

No other record of the created identifiers exists, so the stack that owns
the custom resource is described until it shows up with its outputs.
"""

from __future__ import annotations

import asyncio

from chimeprov.core.config import ProvisionerConfig, get_config
from chimeprov.core.exceptions import (
    PollingTimeoutError,
    StackOutputsMissingError,
)
from chimeprov.core.logger import get_logger
from chimeprov.polling import Deadline, SleepFn, poll_pages
from chimeprov.providers.interfaces import StackProvider
from chimeprov.types import ProvisionedResources, StackDescription

logger = get_logger(__name__)


class StackDiscovery:
    """
    Polls describe_stacks for one stack ID and maps its outputs into
    ProvisionedResources.
    """

    def __init__(
        self,
        stacks: StackProvider,
        config: ProvisionerConfig | None = None,
        deadline: Deadline | None = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.stacks = stacks
        self.config = config or get_config()
        self.deadline = deadline
        self._sleep = sleep

    async def find_stack(self, stack_id: str) -> StackDescription:
        """
        Poll until the stack is listed with outputs.

        Raises:
            StackOutputsMissingError: The stack matched but has no outputs
            PollingTimeoutError: The stack never showed up within budget
        """

        async def fetch(token: str | None) -> tuple[StackDescription | None, str | None]:
            page = await self.stacks.describe_stacks(stack_id, next_token=token)
            for stack in page.items:
                if stack.stack_id == stack_id:
                    if not stack.outputs:
                        raise StackOutputsMissingError(stack_id)
                    return stack, page.next_token
            logger.debug(f"No matching stack in page ({len(page.items)} stacks)")
            return None, page.next_token

        return await poll_pages(
            fetch,
            operation="find_stack",
            interval=self.config.stack_poll_interval,
            max_attempts=self.config.stack_poll_max_attempts,
            deadline=self.deadline,
            sleep=self._sleep,
        )

    async def discover(self, stack_id: str | None, resources: ProvisionedResources) -> bool:
        """
        Populate resources from the stack's outputs.

        Returns:
            True if the stack was found with outputs, False otherwise
        """
        if not stack_id:
            logger.error("No stack ID on the delete request")
            return False

        logger.info(f"Looking up stack outputs for {stack_id}")
        try:
            stack = await self.find_stack(stack_id)
        except StackOutputsMissingError as e:
            logger.error(str(e))
            return False
        except PollingTimeoutError as e:
            logger.error(f"Stack not found: {e}")
            return False

        resources.apply_stack_outputs(stack.outputs or {})
        logger.info(
            f"Discovered sma_id={resources.sma_id} sip_rule_id={resources.sip_rule_id} "
            f"phone_id={resources.phone_id}"
        )
        return True
