"""Server-side procedures exposed through PostgREST RPC."""

from __future__ import annotations

from typing import Any

from nowdo_cli.services.api.client import APIClient, remote_operation
from nowdo_cli.services.api.query import REST_PREFIX


class RpcAPI:
    """RPC API client."""

    def __init__(self, client: APIClient):
        self.client = client

    async def call(self, function: str, args: dict[str, Any]) -> Any:
        response = await self.client.post(f"{REST_PREFIX}/rpc/{function}", json=args)
        if not response.content:
            return None
        return response.json()

    @remote_operation("clear user data")
    async def clear_user_data(self, user_id: str) -> Any:
        """Delete every task, habit, completion and session of the user."""
        return await self.call("clear_user_data", {"target_user_id": user_id})

    @remote_operation("fetch user data summary")
    async def get_user_data_summary(self, user_id: str) -> dict[str, Any]:
        """Per-collection counts and the last activity time for the user."""
        data = await self.call("get_user_data_summary", {"target_user_id": user_id})
        if isinstance(data, list):
            data = data[0] if data else {}
        return data or {}
