# ============================================
# FILE: chimeprov/providers/chime.py
# ============================================

"""
Amazon Chime telephony provider

aioboto3-based implementation of TelephonyProvider. The client is created
lazily on first use and released by close() / async with.
"""

from typing import Any

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from chimeprov.core.exceptions import ProviderCallError
from chimeprov.core.logger import get_logger
from chimeprov.providers.interfaces import TelephonyProvider
from chimeprov.types import Page, PhoneFilter, PhoneNumberOrder, PhoneNumberRecord

logger = get_logger(__name__)


class ChimeTelephonyProvider(TelephonyProvider):
    """
    Amazon Chime implementation of the telephony provider

    Example:
        >>> async with ChimeTelephonyProvider(region_name="us-east-1") as chime:
        ...     numbers = await chime.search_available_phone_numbers(
        ...         PhoneFilter(country="US", state="IL")
        ...     )
    """

    def __init__(
        self,
        region_name: str | None = None,
        service_name: str = "chime",
        session: Any = None,
        **client_kwargs,
    ):
        self.region_name = region_name
        self.service_name = service_name
        self.client_kwargs = client_kwargs
        self._session = session
        self._client_cm = None
        self._client = None

    async def _get_client(self):
        """Get the Chime client, creating it if necessary"""
        if self._client is None:
            if self._session is None:
                self._session = aioboto3.Session()
            self._client_cm = self._session.client(
                self.service_name, region_name=self.region_name, **self.client_kwargs
            )
            self._client = await self._client_cm.__aenter__()
        return self._client

    async def close(self) -> None:
        if self._client_cm is not None:
            await self._client_cm.__aexit__(None, None, None)
        self._client_cm = None
        self._client = None

    async def _call(self, operation: str, **params) -> dict[str, Any]:
        client = await self._get_client()
        logger.debug(f"{self.service_name}.{operation}: {params}")
        try:
            return await getattr(client, operation)(**params)
        except (ClientError, BotoCoreError) as e:
            raise ProviderCallError(operation, e) from e

    # ==========================================================================
    # Phone numbers
    # ==========================================================================

    async def search_available_phone_numbers(
        self, phone_filter: PhoneFilter, max_results: int | None = None
    ) -> list[str]:
        params: dict[str, Any] = phone_filter.to_params()
        if max_results is not None:
            params["MaxResults"] = max_results
        response = await self._call("search_available_phone_numbers", **params)
        return list(response.get("E164PhoneNumbers") or [])

    async def create_phone_number_order(
        self, e164_phone_numbers: list[str], product_type: str
    ) -> str:
        response = await self._call(
            "create_phone_number_order",
            ProductType=product_type,
            E164PhoneNumbers=list(e164_phone_numbers),
        )
        order_id = (response.get("PhoneNumberOrder") or {}).get("PhoneNumberOrderId")
        if not order_id:
            raise ProviderCallError(
                "create_phone_number_order", ValueError("response has no PhoneNumberOrderId")
            )
        return order_id

    async def list_phone_number_orders(
        self, next_token: str | None = None, max_results: int = 99
    ) -> Page[PhoneNumberOrder]:
        params: dict[str, Any] = {"MaxResults": max_results}
        if next_token:
            params["NextToken"] = next_token
        response = await self._call("list_phone_number_orders", **params)
        orders = [
            PhoneNumberOrder(order_id=o["PhoneNumberOrderId"], status=o.get("Status"))
            for o in response.get("PhoneNumberOrders") or []
            if o.get("PhoneNumberOrderId")
        ]
        return Page(items=orders, next_token=response.get("NextToken") or None)

    async def list_phone_numbers(
        self,
        product_type: str | None = None,
        status: str | None = None,
        next_token: str | None = None,
        max_results: int = 99,
    ) -> Page[PhoneNumberRecord]:
        params: dict[str, Any] = {"MaxResults": max_results}
        if product_type:
            params["ProductType"] = product_type
        if status:
            params["Status"] = status
        if next_token:
            params["NextToken"] = next_token
        response = await self._call("list_phone_numbers", **params)
        numbers = [
            PhoneNumberRecord(
                phone_number_id=n["PhoneNumberId"],
                e164_phone_number=n.get("E164PhoneNumber", ""),
                status=n.get("Status"),
            )
            for n in response.get("PhoneNumbers") or []
            if n.get("PhoneNumberId")
        ]
        return Page(items=numbers, next_token=response.get("NextToken") or None)

    async def delete_phone_number(self, phone_number_id: str) -> None:
        await self._call("delete_phone_number", PhoneNumberId=phone_number_id)

    # ==========================================================================
    # SIP media applications
    # ==========================================================================

    async def create_sip_media_application(
        self, name: str, region: str, lambda_arn: str
    ) -> str:
        response = await self._call(
            "create_sip_media_application",
            Name=name,
            AwsRegion=region,
            Endpoints=[{"LambdaArn": lambda_arn}],
        )
        sma_id = (response.get("SipMediaApplication") or {}).get("SipMediaApplicationId")
        if not sma_id:
            raise ProviderCallError(
                "create_sip_media_application",
                ValueError("response has no SipMediaApplicationId"),
            )
        return sma_id

    async def delete_sip_media_application(self, sip_media_application_id: str) -> None:
        await self._call(
            "delete_sip_media_application", SipMediaApplicationId=sip_media_application_id
        )

    # ==========================================================================
    # SIP rules
    # ==========================================================================

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
        response = await self._call(
            "create_sip_rule",
            Name=name,
            TriggerType=trigger_type,
            TriggerValue=trigger_value,
            Disabled=disabled,
            TargetApplications=[
                {
                    "SipMediaApplicationId": sip_media_application_id,
                    "Priority": priority,
                    "AwsRegion": region,
                }
            ],
        )
        sip_rule_id = (response.get("SipRule") or {}).get("SipRuleId")
        if not sip_rule_id:
            raise ProviderCallError("create_sip_rule", ValueError("response has no SipRuleId"))
        return sip_rule_id

    async def update_sip_rule(self, sip_rule_id: str, name: str, disabled: bool) -> None:
        await self._call("update_sip_rule", SipRuleId=sip_rule_id, Name=name, Disabled=disabled)

    async def delete_sip_rule(self, sip_rule_id: str) -> None:
        await self._call("delete_sip_rule", SipRuleId=sip_rule_id)
