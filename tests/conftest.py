"""
Pytest configuration and shared fixtures for provisioner tests
"""

import logging
from unittest.mock import AsyncMock

import pytest

from chimeprov.core.config import ProvisionerConfig
from chimeprov.core.logger import set_logger
from chimeprov.events import parse_request
from chimeprov.providers.memory import InMemoryStackProvider, InMemoryTelephonyProvider

STACK_ID = "arn:aws:cloudformation:us-east-1:123456789012:stack/sma-stack/abc-123"
PHONE_NUMBER = "+13125550100"


def make_event(request_type: str = "Create", **properties) -> dict:
    resource_properties = {
        "region": "us-east-1",
        "smaName": "test-sma",
        "sipRuleName": "test-rule",
        "lambdaArn": "arn:aws:lambda:us-east-1:123456789012:function:sma-handler",
        "phoneNumberType": "SipMediaApplicationDialIn",
        "sipTriggerType": "ToPhoneNumber",
        "phoneCountry": "US",
        "phoneState": "IL",
    }
    resource_properties.update(properties)
    return {
        "RequestType": request_type,
        "RequestId": "req-0001",
        "StackId": STACK_ID,
        "LogicalResourceId": "ChimeResources",
        "PhysicalResourceId": "ChimeSDKProvider",
        "ResourceProperties": resource_properties,
    }


@pytest.fixture(autouse=True)
def reset_custom_logger():
    """Make sure no test leaks a custom logger or handler setup into the next one."""
    package_logger = logging.getLogger("chimeprov")
    handlers = package_logger.handlers[:]
    level, propagate = package_logger.level, package_logger.propagate
    yield
    set_logger(None)
    package_logger.handlers = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate


@pytest.fixture
def config():
    """Small budgets so timeout paths finish quickly."""
    return ProvisionerConfig(
        order_poll_interval=5.0,
        order_poll_max_attempts=10,
        phone_id_poll_interval=1.0,
        phone_id_poll_max_attempts=10,
        stack_poll_interval=0.25,
        stack_poll_max_attempts=10,
        phone_delete_delay=5.0,
    )


@pytest.fixture
def sleep():
    """Injected sleep that records requested delays instead of waiting."""
    return AsyncMock(return_value=None)


@pytest.fixture
def event_factory():
    return make_event


@pytest.fixture
def create_event():
    return make_event("Create")


@pytest.fixture
def delete_event():
    return make_event("Delete")


@pytest.fixture
def request_config(create_event):
    return parse_request(create_event)


@pytest.fixture
def telephony():
    return InMemoryTelephonyProvider(available_numbers=[PHONE_NUMBER, "+13125550101"])


@pytest.fixture
def stacks():
    return InMemoryStackProvider(
        {STACK_ID: {"smaID": "sma-0001", "sipRuleID": "rule-0002", "phoneID": PHONE_NUMBER}}
    )
