"""
Unit tests for the aioboto3 Chime provider with a mocked client.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from chimeprov.core.exceptions import ProviderCallError
from chimeprov.providers.chime import ChimeTelephonyProvider
from chimeprov.types import PhoneFilter


@pytest.fixture
def mock_client():
    return AsyncMock()


@pytest.fixture
def mock_session(mock_client):
    session = MagicMock()
    session.client.return_value.__aenter__.return_value = mock_client
    return session


@pytest.fixture
def chime(mock_session):
    return ChimeTelephonyProvider(region_name="us-east-1", session=mock_session)


def _client_error(operation: str, code: str = "BadRequestException") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "bad service request"}}, operation)


class TestClientLifecycle:
    @pytest.mark.asyncio
    async def test_client_created_lazily_once(self, chime, mock_session, mock_client):
        mock_session.client.assert_not_called()
        mock_client.delete_sip_rule.return_value = {}

        await chime.delete_sip_rule("rule-1")
        await chime.delete_sip_rule("rule-2")

        mock_session.client.assert_called_once_with("chime", region_name="us-east-1")

    @pytest.mark.asyncio
    async def test_service_name_configurable(self, mock_session, mock_client):
        mock_client.delete_sip_rule.return_value = {}
        provider = ChimeTelephonyProvider(
            region_name="us-east-1", service_name="chime-sdk-voice", session=mock_session
        )

        await provider.delete_sip_rule("rule-1")

        mock_session.client.assert_called_once_with("chime-sdk-voice", region_name="us-east-1")

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self, mock_session, mock_client):
        mock_client.delete_sip_rule.return_value = {}

        async with ChimeTelephonyProvider(region_name="us-east-1", session=mock_session) as chime:
            await chime.delete_sip_rule("rule-1")

        mock_session.client.return_value.__aexit__.assert_awaited_once()
        assert chime._client is None

    @pytest.mark.asyncio
    async def test_default_session(self, mock_client):
        with patch("chimeprov.providers.chime.aioboto3") as mock_aioboto3:
            session = mock_aioboto3.Session.return_value
            session.client.return_value.__aenter__.return_value = mock_client
            mock_client.delete_sip_rule.return_value = {}

            await ChimeTelephonyProvider(region_name="eu-west-1").delete_sip_rule("rule-1")

            mock_aioboto3.Session.assert_called_once_with()
            session.client.assert_called_once_with("chime", region_name="eu-west-1")


class TestPhoneNumbers:
    @pytest.mark.asyncio
    async def test_search_sends_only_populated_filters(self, chime, mock_client):
        mock_client.search_available_phone_numbers.return_value = {
            "E164PhoneNumbers": ["+13125550100", "+13125550101"]
        }

        numbers = await chime.search_available_phone_numbers(PhoneFilter(country="US", state="IL"))

        assert numbers == ["+13125550100", "+13125550101"]
        mock_client.search_available_phone_numbers.assert_awaited_once_with(
            Country="US", State="IL"
        )

    @pytest.mark.asyncio
    async def test_search_empty_response(self, chime, mock_client):
        mock_client.search_available_phone_numbers.return_value = {}
        assert await chime.search_available_phone_numbers(PhoneFilter(), max_results=5) == []
        mock_client.search_available_phone_numbers.assert_awaited_once_with(MaxResults=5)

    @pytest.mark.asyncio
    async def test_create_order(self, chime, mock_client):
        mock_client.create_phone_number_order.return_value = {
            "PhoneNumberOrder": {"PhoneNumberOrderId": "order-1", "Status": "Processing"}
        }

        order_id = await chime.create_phone_number_order(
            ["+13125550100"], "SipMediaApplicationDialIn"
        )

        assert order_id == "order-1"
        mock_client.create_phone_number_order.assert_awaited_once_with(
            ProductType="SipMediaApplicationDialIn", E164PhoneNumbers=["+13125550100"]
        )

    @pytest.mark.asyncio
    async def test_create_order_without_id_raises(self, chime, mock_client):
        mock_client.create_phone_number_order.return_value = {"PhoneNumberOrder": {}}

        with pytest.raises(ProviderCallError, match="create_phone_number_order"):
            await chime.create_phone_number_order(["+13125550100"], "SipMediaApplicationDialIn")

    @pytest.mark.asyncio
    async def test_list_orders_first_page_has_no_token(self, chime, mock_client):
        mock_client.list_phone_number_orders.return_value = {
            "PhoneNumberOrders": [
                {"PhoneNumberOrderId": "order-1", "Status": "Successful"},
                {"Status": "Failed"},
            ],
            "NextToken": "page-2",
        }

        page = await chime.list_phone_number_orders(max_results=99)

        mock_client.list_phone_number_orders.assert_awaited_once_with(MaxResults=99)
        assert [o.order_id for o in page.items] == ["order-1"]
        assert page.items[0].is_successful
        assert page.next_token == "page-2"

    @pytest.mark.asyncio
    async def test_list_orders_passes_token(self, chime, mock_client):
        mock_client.list_phone_number_orders.return_value = {"PhoneNumberOrders": []}

        page = await chime.list_phone_number_orders(next_token="page-2", max_results=10)

        mock_client.list_phone_number_orders.assert_awaited_once_with(
            MaxResults=10, NextToken="page-2"
        )
        assert page.items == []
        assert page.next_token is None

    @pytest.mark.asyncio
    async def test_list_phone_numbers(self, chime, mock_client):
        mock_client.list_phone_numbers.return_value = {
            "PhoneNumbers": [
                {
                    "PhoneNumberId": "+13125550100",
                    "E164PhoneNumber": "+13125550100",
                    "Status": "Unassigned",
                }
            ],
            "NextToken": "",
        }

        page = await chime.list_phone_numbers(
            product_type="SipMediaApplicationDialIn", status="Unassigned"
        )

        mock_client.list_phone_numbers.assert_awaited_once_with(
            MaxResults=99, ProductType="SipMediaApplicationDialIn", Status="Unassigned"
        )
        assert page.items[0].phone_number_id == "+13125550100"
        assert page.next_token is None

    @pytest.mark.asyncio
    async def test_delete_phone_number(self, chime, mock_client):
        mock_client.delete_phone_number.return_value = {}
        await chime.delete_phone_number("pn-1")
        mock_client.delete_phone_number.assert_awaited_once_with(PhoneNumberId="pn-1")


class TestSipResources:
    @pytest.mark.asyncio
    async def test_create_sip_media_application(self, chime, mock_client):
        mock_client.create_sip_media_application.return_value = {
            "SipMediaApplication": {"SipMediaApplicationId": "sma-1"}
        }

        sma_id = await chime.create_sip_media_application(
            name="test-sma", region="us-east-1", lambda_arn="arn:aws:lambda:fn"
        )

        assert sma_id == "sma-1"
        mock_client.create_sip_media_application.assert_awaited_once_with(
            Name="test-sma", AwsRegion="us-east-1", Endpoints=[{"LambdaArn": "arn:aws:lambda:fn"}]
        )

    @pytest.mark.asyncio
    async def test_create_sip_rule(self, chime, mock_client):
        mock_client.create_sip_rule.return_value = {"SipRule": {"SipRuleId": "rule-1"}}

        rule_id = await chime.create_sip_rule(
            name="test-rule",
            trigger_type="ToPhoneNumber",
            trigger_value="+13125550100",
            sip_media_application_id="sma-1",
            region="us-east-1",
        )

        assert rule_id == "rule-1"
        mock_client.create_sip_rule.assert_awaited_once_with(
            Name="test-rule",
            TriggerType="ToPhoneNumber",
            TriggerValue="+13125550100",
            Disabled=False,
            TargetApplications=[
                {"SipMediaApplicationId": "sma-1", "Priority": 1, "AwsRegion": "us-east-1"}
            ],
        )

    @pytest.mark.asyncio
    async def test_create_sip_rule_without_id_raises(self, chime, mock_client):
        mock_client.create_sip_rule.return_value = {}

        with pytest.raises(ProviderCallError):
            await chime.create_sip_rule("r", "ToPhoneNumber", "+1", "sma-1", "us-east-1")

    @pytest.mark.asyncio
    async def test_disable_and_delete(self, chime, mock_client):
        await chime.update_sip_rule("rule-1", name="test-rule", disabled=True)
        await chime.delete_sip_rule("rule-1")
        await chime.delete_sip_media_application("sma-1")

        mock_client.update_sip_rule.assert_awaited_once_with(
            SipRuleId="rule-1", Name="test-rule", Disabled=True
        )
        mock_client.delete_sip_rule.assert_awaited_once_with(SipRuleId="rule-1")
        mock_client.delete_sip_media_application.assert_awaited_once_with(
            SipMediaApplicationId="sma-1"
        )


class TestErrorTranslation:
    @pytest.mark.asyncio
    async def test_client_error_wrapped(self, chime, mock_client):
        error = _client_error("DeletePhoneNumber")
        mock_client.delete_phone_number.side_effect = error

        with pytest.raises(ProviderCallError) as exc_info:
            await chime.delete_phone_number("pn-1")

        assert exc_info.value.operation == "delete_phone_number"
        assert exc_info.value.cause is error
        assert exc_info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_connection_error_wrapped(self, chime, mock_client):
        mock_client.list_phone_numbers.side_effect = EndpointConnectionError(
            endpoint_url="https://chime.us-east-1.amazonaws.com"
        )

        with pytest.raises(ProviderCallError, match="list_phone_numbers"):
            await chime.list_phone_numbers()

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self, chime, mock_client):
        mock_client.delete_sip_rule.side_effect = KeyError("surprise")

        with pytest.raises(KeyError):
            await chime.delete_sip_rule("rule-1")
