"""
Provider implementations for the telephony and stack control planes.

Usage:
    >>> from chimeprov.providers import ChimeTelephonyProvider, CloudFormationStackProvider
    >>>
    >>> async with ChimeTelephonyProvider(region_name="us-east-1") as telephony:
    ...     ...
"""

from chimeprov.providers.chime import ChimeTelephonyProvider
from chimeprov.providers.cloudformation import CloudFormationStackProvider
from chimeprov.providers.interfaces import StackProvider, TelephonyProvider
from chimeprov.providers.memory import InMemoryStackProvider, InMemoryTelephonyProvider

__all__ = [
    "ChimeTelephonyProvider",
    "CloudFormationStackProvider",
    "InMemoryStackProvider",
    "InMemoryTelephonyProvider",
    "StackProvider",
    "TelephonyProvider",
]
