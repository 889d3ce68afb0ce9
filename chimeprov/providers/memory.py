"""
In-Memory Providers - For testing and dry runs.
"""

from __future__ import annotations

import itertools

from chimeprov.core.exceptions import ProviderCallError
from chimeprov.providers.interfaces import StackProvider, TelephonyProvider
from chimeprov.types import (
    ORDER_STATUS_SUCCESSFUL,
    PHONE_STATUS_UNASSIGNED,
    Page,
    PhoneFilter,
    PhoneNumberOrder,
    PhoneNumberRecord,
    StackDescription,
)


def _paginate(items: list, next_token: str | None, page_size: int) -> tuple[list, str | None]:
    start = int(next_token) if next_token else 0
    end = start + page_size
    return items[start:end], (str(end) if end < len(items) else None)


class InMemoryTelephonyProvider(TelephonyProvider):
    """
    In-memory telephony provider.

    Orders stay "In progress" for `order_pending_polls` list calls before
    turning "Successful". Every call is appended to `calls` as
    (operation, args) so tests can assert on ordering.

    Usage:
        >>> telephony = InMemoryTelephonyProvider(available_numbers=["+13125550100"])
        >>> await telephony.search_available_phone_numbers(PhoneFilter(state="IL"))
        ['+13125550100']
    """

    def __init__(
        self,
        available_numbers: list[str] | None = None,
        order_pending_polls: int = 0,
        page_size: int | None = None,
    ):
        self.available_numbers = list(available_numbers or [])
        self.order_pending_polls = order_pending_polls
        self.page_size = page_size
        self.calls: list[tuple[str, tuple]] = []
        self.fail_operations: set[str] = set()

        self.orders: dict[str, dict] = {}
        self.phone_numbers: dict[str, PhoneNumberRecord] = {}
        self.sip_media_applications: dict[str, dict] = {}
        self.sip_rules: dict[str, dict] = {}
        self._ids = itertools.count(1)

    def _record(self, operation: str, *args) -> None:
        self.calls.append((operation, args))
        if operation in self.fail_operations:
            raise ProviderCallError(operation, RuntimeError("injected failure"))

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids):04d}"

    @property
    def operations(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def search_available_phone_numbers(
        self, phone_filter: PhoneFilter, max_results: int | None = None
    ) -> list[str]:
        self._record("search_available_phone_numbers", phone_filter)
        numbers = list(self.available_numbers)
        return numbers[:max_results] if max_results else numbers

    async def create_phone_number_order(
        self, e164_phone_numbers: list[str], product_type: str
    ) -> str:
        self._record("create_phone_number_order", tuple(e164_phone_numbers), product_type)
        order_id = self._next_id("order")
        self.orders[order_id] = {
            "numbers": list(e164_phone_numbers),
            "product_type": product_type,
            "pending": self.order_pending_polls,
            "status": "In progress",
        }
        for number in e164_phone_numbers:
            if number in self.available_numbers:
                self.available_numbers.remove(number)
        return order_id

    def _advance_orders(self) -> None:
        for order in self.orders.values():
            if order["status"] == ORDER_STATUS_SUCCESSFUL:
                continue
            if order["pending"] > 0:
                order["pending"] -= 1
                continue
            order["status"] = ORDER_STATUS_SUCCESSFUL
            for number in order["numbers"]:
                record = PhoneNumberRecord(
                    phone_number_id=number,
                    e164_phone_number=number,
                    status=PHONE_STATUS_UNASSIGNED,
                )
                self.phone_numbers[record.phone_number_id] = record

    async def list_phone_number_orders(
        self, next_token: str | None = None, max_results: int = 99
    ) -> Page[PhoneNumberOrder]:
        self._record("list_phone_number_orders", next_token)
        self._advance_orders()
        orders = [
            PhoneNumberOrder(order_id=order_id, status=o["status"])
            for order_id, o in self.orders.items()
        ]
        items, token = _paginate(orders, next_token, self.page_size or max_results)
        return Page(items=items, next_token=token)

    async def list_phone_numbers(
        self,
        product_type: str | None = None,
        status: str | None = None,
        next_token: str | None = None,
        max_results: int = 99,
    ) -> Page[PhoneNumberRecord]:
        self._record("list_phone_numbers", next_token)
        numbers = [
            n for n in self.phone_numbers.values() if status is None or n.status == status
        ]
        items, token = _paginate(numbers, next_token, self.page_size or max_results)
        return Page(items=items, next_token=token)

    async def delete_phone_number(self, phone_number_id: str) -> None:
        self._record("delete_phone_number", phone_number_id)
        if phone_number_id not in self.phone_numbers:
            raise ProviderCallError("delete_phone_number", KeyError(phone_number_id))
        del self.phone_numbers[phone_number_id]

    async def create_sip_media_application(
        self, name: str, region: str, lambda_arn: str
    ) -> str:
        self._record("create_sip_media_application", name, region, lambda_arn)
        sma_id = self._next_id("sma")
        self.sip_media_applications[sma_id] = {
            "name": name,
            "region": region,
            "endpoints": [lambda_arn],
        }
        return sma_id

    async def delete_sip_media_application(self, sip_media_application_id: str) -> None:
        self._record("delete_sip_media_application", sip_media_application_id)
        if sip_media_application_id not in self.sip_media_applications:
            raise ProviderCallError(
                "delete_sip_media_application", KeyError(sip_media_application_id)
            )
        del self.sip_media_applications[sip_media_application_id]

    async def create_sip_rule(
        self,
        name: str,
        trigger_type: str,
        trigger_value: str,
        sip_media_application_id: str,
        region: str,
        priority: int = 1,
        disabled: bool = False,
    ) -> str:
        self._record(
            "create_sip_rule", name, trigger_type, trigger_value, sip_media_application_id
        )
        rule_id = self._next_id("rule")
        self.sip_rules[rule_id] = {
            "name": name,
            "trigger_type": trigger_type,
            "trigger_value": trigger_value,
            "targets": [
                {"sma_id": sip_media_application_id, "priority": priority, "region": region}
            ],
            "disabled": disabled,
        }
        return rule_id

    async def update_sip_rule(self, sip_rule_id: str, name: str, disabled: bool) -> None:
        self._record("update_sip_rule", sip_rule_id, name, disabled)
        if sip_rule_id not in self.sip_rules:
            raise ProviderCallError("update_sip_rule", KeyError(sip_rule_id))
        self.sip_rules[sip_rule_id].update(name=name, disabled=disabled)

    async def delete_sip_rule(self, sip_rule_id: str) -> None:
        self._record("delete_sip_rule", sip_rule_id)
        if sip_rule_id not in self.sip_rules:
            raise ProviderCallError("delete_sip_rule", KeyError(sip_rule_id))
        del self.sip_rules[sip_rule_id]


class InMemoryStackProvider(StackProvider):
    """In-memory stack provider keyed by stack ID."""

    def __init__(self, stacks: dict[str, dict[str, str] | None] | None = None):
        self.stacks: dict[str, dict[str, str] | None] = dict(stacks or {})
        self.calls: list[tuple[str, str | None]] = []

    async def describe_stacks(
        self, stack_name: str, next_token: str | None = None
    ) -> Page[StackDescription]:
        self.calls.append((stack_name, next_token))
        matches = [
            StackDescription(stack_id=stack_id, stack_name=stack_id, outputs=outputs)
            for stack_id, outputs in self.stacks.items()
            if stack_id == stack_name
        ]
        return Page(items=matches, next_token=None)
