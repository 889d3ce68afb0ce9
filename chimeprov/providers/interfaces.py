"""
Provider interfaces.

Capability-based abstraction over the two control-plane APIs the
provisioner talks to. Implementations translate SDK failures into
ProviderCallError so that callers handle exactly one exception type.
"""

from abc import ABC, abstractmethod

from chimeprov.types import (
    Page,
    PhoneFilter,
    PhoneNumberOrder,
    PhoneNumberRecord,
    StackDescription,
)


class TelephonyProvider(ABC):
    """
    Telephony control plane: phone numbers, SIP media applications and
    SIP rules.

    All list operations accept the token returned by the previous page and
    return a Page whose next_token is None on the last page.
    """

    # ==========================================================================
    # Phone numbers
    # ==========================================================================

    @abstractmethod
    async def search_available_phone_numbers(
        self, phone_filter: PhoneFilter, max_results: int | None = None
    ) -> list[str]:
        """Return E.164 numbers available for ordering."""
        ...

    @abstractmethod
    async def create_phone_number_order(
        self, e164_phone_numbers: list[str], product_type: str
    ) -> str:
        """Order the given numbers and return the phone number order ID."""
        ...

    @abstractmethod
    async def list_phone_number_orders(
        self, next_token: str | None = None, max_results: int = 99
    ) -> Page[PhoneNumberOrder]:
        ...

    @abstractmethod
    async def list_phone_numbers(
        self,
        product_type: str | None = None,
        status: str | None = None,
        next_token: str | None = None,
        max_results: int = 99,
    ) -> Page[PhoneNumberRecord]:
        ...

    @abstractmethod
    async def delete_phone_number(self, phone_number_id: str) -> None:
        ...

    # ==========================================================================
    # SIP media applications
    # ==========================================================================

    @abstractmethod
    async def create_sip_media_application(
        self, name: str, region: str, lambda_arn: str
    ) -> str:
        """Create an SMA with a single Lambda endpoint and return its ID."""
        ...

    @abstractmethod
    async def delete_sip_media_application(self, sip_media_application_id: str) -> None:
        ...

    # ==========================================================================
    # SIP rules
    # ==========================================================================

    @abstractmethod
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
        """Create a SIP rule with one target application and return its ID."""
        ...

    @abstractmethod
    async def update_sip_rule(self, sip_rule_id: str, name: str, disabled: bool) -> None:
        ...

    @abstractmethod
    async def delete_sip_rule(self, sip_rule_id: str) -> None:
        ...

    async def close(self) -> None:  # noqa: B027
        """Release SDK clients. No-op by default."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class StackProvider(ABC):
    """Stack description API used to recover identifiers on delete."""

    @abstractmethod
    async def describe_stacks(
        self, stack_name: str, next_token: str | None = None
    ) -> Page[StackDescription]:
        ...

    async def close(self) -> None:  # noqa: B027
        """Release SDK clients. No-op by default."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
