"""
Tests for recovering resource identifiers from stack outputs.
"""

from unittest.mock import AsyncMock, call

import pytest

from chimeprov.core.exceptions import (
    PollingTimeoutError,
    ProviderCallError,
    StackOutputsMissingError,
)
from chimeprov.discovery import StackDiscovery
from chimeprov.providers.interfaces import StackProvider
from chimeprov.providers.memory import InMemoryStackProvider
from chimeprov.types import Page, ProvisionedResources, StackDescription

STACK = "arn:aws:cloudformation:us-east-1:123456789012:stack/sma-stack/abc-123"
OUTPUTS = {"smaID": "sma-1", "sipRuleID": "rule-1", "phoneID": "pn-1", "other": "x"}


class TestDiscover:
    @pytest.mark.asyncio
    async def test_maps_outputs_into_resources(self, config, sleep):
        stacks = InMemoryStackProvider({STACK: OUTPUTS})
        resources = ProvisionedResources()

        found = await StackDiscovery(stacks, config, sleep=sleep).discover(STACK, resources)

        assert found is True
        assert resources.sma_id == "sma-1"
        assert resources.sip_rule_id == "rule-1"
        assert resources.phone_id == "pn-1"
        assert resources.stack_outputs == OUTPUTS

    @pytest.mark.asyncio
    async def test_missing_keys_leave_fields_empty(self, config, sleep):
        stacks = InMemoryStackProvider({STACK: {"smaID": "sma-1", "phoneID": "pn-1"}})
        resources = ProvisionedResources()

        found = await StackDiscovery(stacks, config, sleep=sleep).discover(STACK, resources)

        assert found is True
        assert resources.sip_rule_id is None

    @pytest.mark.asyncio
    async def test_none_placeholder_treated_as_missing(self, config, sleep):
        stacks = InMemoryStackProvider({STACK: {"smaID": "sma-1", "sipRuleID": "none"}})
        resources = ProvisionedResources()

        await StackDiscovery(stacks, config, sleep=sleep).discover(STACK, resources)

        assert resources.sip_rule_id is None

    @pytest.mark.asyncio
    async def test_stack_without_outputs_fails_immediately(self, config, sleep):
        stacks = InMemoryStackProvider({STACK: None})
        resources = ProvisionedResources()

        found = await StackDiscovery(stacks, config, sleep=sleep).discover(STACK, resources)

        assert found is False
        assert len(stacks.calls) == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_stack_times_out(self, config, sleep):
        stacks = InMemoryStackProvider({})

        found = await StackDiscovery(stacks, config, sleep=sleep).discover(
            STACK, ProvisionedResources()
        )

        assert found is False
        assert len(stacks.calls) == config.stack_poll_max_attempts
        sleep.assert_awaited_with(0.25)

    @pytest.mark.asyncio
    async def test_no_stack_id(self, config, sleep):
        stacks = InMemoryStackProvider({STACK: OUTPUTS})

        found = await StackDiscovery(stacks, config, sleep=sleep).discover(
            None, ProvisionedResources()
        )

        assert found is False
        assert stacks.calls == []


class TestFindStack:
    @pytest.mark.asyncio
    async def test_paginates_with_token_and_no_delay(self, config, sleep):
        stacks = AsyncMock(spec=StackProvider)
        stacks.describe_stacks.side_effect = [
            Page(items=[StackDescription("other-stack", outputs={"a": "b"})], next_token="s2"),
            Page(items=[StackDescription(STACK, outputs=OUTPUTS)]),
        ]

        stack = await StackDiscovery(stacks, config, sleep=sleep).find_stack(STACK)

        assert stack.outputs == OUTPUTS
        assert stacks.describe_stacks.await_args_list == [
            call(STACK, next_token=None),
            call(STACK, next_token="s2"),
        ]
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_polls_at_fixed_interval_until_listed(self, config, sleep):
        stacks = AsyncMock(spec=StackProvider)
        stacks.describe_stacks.side_effect = [
            Page(items=[]),
            Page(items=[]),
            Page(items=[StackDescription(STACK, outputs=OUTPUTS)]),
        ]

        await StackDiscovery(stacks, config, sleep=sleep).find_stack(STACK)

        assert sleep.await_args_list == [call(0.25), call(0.25)]

    @pytest.mark.asyncio
    async def test_provider_errors_are_retried(self, config, sleep):
        stacks = AsyncMock(spec=StackProvider)
        stacks.describe_stacks.side_effect = [
            ProviderCallError("describe_stacks"),
            Page(items=[StackDescription(STACK, outputs=OUTPUTS)]),
        ]

        stack = await StackDiscovery(stacks, config, sleep=sleep).find_stack(STACK)

        assert stack.stack_id == STACK

    @pytest.mark.asyncio
    async def test_raises_outputs_missing(self, config, sleep):
        stacks = AsyncMock(spec=StackProvider)
        stacks.describe_stacks.return_value = Page(items=[StackDescription(STACK)])

        with pytest.raises(StackOutputsMissingError):
            await StackDiscovery(stacks, config, sleep=sleep).find_stack(STACK)

    @pytest.mark.asyncio
    async def test_raises_timeout(self, config, sleep):
        stacks = AsyncMock(spec=StackProvider)
        stacks.describe_stacks.return_value = Page(items=[])

        with pytest.raises(PollingTimeoutError) as exc_info:
            await StackDiscovery(stacks, config, sleep=sleep).find_stack(STACK)

        assert exc_info.value.operation == "find_stack"
