"""
CloudFormation stack provider

aioboto3-based implementation of StackProvider, used on delete to read back
the identifiers the stack exported as outputs.
"""

from typing import Any

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from chimeprov.core.exceptions import ProviderCallError
from chimeprov.providers.interfaces import StackProvider
from chimeprov.types import Page, StackDescription


class CloudFormationStackProvider(StackProvider):
    def __init__(self, region_name: str | None = None, session: Any = None, **client_kwargs):
        self.region_name = region_name
        self.client_kwargs = client_kwargs
        self._session = session
        self._client_cm = None
        self._client = None

    async def _get_client(self):
        """Get the CloudFormation client, creating it if necessary"""
        if self._client is None:
            if self._session is None:
                self._session = aioboto3.Session()
            self._client_cm = self._session.client(
                "cloudformation", region_name=self.region_name, **self.client_kwargs
            )
            self._client = await self._client_cm.__aenter__()
        return self._client

    async def close(self) -> None:
        if self._client_cm is not None:
            await self._client_cm.__aexit__(None, None, None)
        self._client_cm = None
        self._client = None

    async def describe_stacks(
        self, stack_name: str, next_token: str | None = None
    ) -> Page[StackDescription]:
        client = await self._get_client()
        params: dict[str, Any] = {"StackName": stack_name}
        if next_token:
            params["NextToken"] = next_token

        try:
            response = await client.describe_stacks(**params)
        except (ClientError, BotoCoreError) as e:
            raise ProviderCallError("describe_stacks", e) from e

        stacks = []
        for s in response.get("Stacks") or []:
            outputs = s.get("Outputs")
            stacks.append(
                StackDescription(
                    stack_id=s.get("StackId", ""),
                    stack_name=s.get("StackName"),
                    outputs=(
                        {o["OutputKey"]: o.get("OutputValue", "") for o in outputs}
                        if outputs
                        else None
                    ),
                )
            )
        return Page(items=stacks, next_token=response.get("NextToken") or None)
