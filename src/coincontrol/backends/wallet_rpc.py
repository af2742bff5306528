"""
JSON-RPC wallet gateway over HTTP.
"""

from __future__ import annotations

import json
import os
from decimal import Decimal
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from coincontrol.backends.base import RpcResult, T, WalletGateway, WalletRequest, WalletRpcError
from coincontrol.constants import DEFAULT_RPC_TIMEOUT, DEFAULT_RPC_URL

# Environment variable to enable sensitive logging (raw RPC results)
# WARNING: Enabling this will log addresses and amounts to the log
SENSITIVE_LOGGING = os.environ.get("SENSITIVE_LOGGING", "").lower() in ("1", "true", "yes")


def encode_json(value: Any) -> str:
    """
    Serialize a JSON-RPC payload, writing Decimal values as exact JSON numbers.

    Raises:
        ValueError: For NaN or infinite Decimals
    """
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Cannot encode non-finite amount: {value}")
        return format(value, "f")
    if isinstance(value, dict):
        items = (f"{json.dumps(str(k))}: {encode_json(v)}" for k, v in value.items())
        return "{" + ", ".join(items) + "}"
    if isinstance(value, list | tuple):
        return "[" + ", ".join(encode_json(v) for v in value) + "]"
    return json.dumps(value)


class WalletRpcClient(WalletGateway):
    """
    Wallet gateway speaking JSON-RPC to the wallet daemon with basic auth.
    """

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC_URL,
        rpc_user: str = "rpcuser",
        rpc_password: str = "rpcpassword",
        timeout: float = DEFAULT_RPC_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.rpc_url = rpc_url.rstrip("/")
        self.rpc_user = rpc_user
        self.timeout = timeout
        self.client = httpx.AsyncClient(
            timeout=timeout, auth=(rpc_user, rpc_password), transport=transport
        )
        self._request_id = 0

    async def _rpc_call(self, method: str, params: list | None = None) -> Any:
        """
        Make an RPC call to the wallet.

        Args:
            method: RPC method name
            params: Method parameters

        Returns:
            RPC result, with JSON numbers decoded as Decimal

        Raises:
            WalletRpcError: On RPC errors
            httpx.HTTPError: On connection/timeout errors
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "1.0",
            "id": self._request_id,
            "method": method,
            "params": params or [],
        }

        try:
            response = await self.client.post(
                self.rpc_url,
                content=encode_json(payload),
                headers={"Content-Type": "application/json"},
            )
            # The daemon reports RPC errors with HTTP 500 and a JSON body
            if response.status_code != 500:
                response.raise_for_status()
            data = json.loads(response.text, parse_float=Decimal)
            if not isinstance(data, dict):
                raise WalletRpcError("invalid", f"Unexpected JSON-RPC envelope: {data!r}")

            if "error" in data and data["error"]:
                error_info = data["error"]
                if isinstance(error_info, dict):
                    error_code = error_info.get("code", "unknown")
                    error_msg = error_info.get("message", str(error_info))
                    raise WalletRpcError(error_code, error_msg)
                raise WalletRpcError("unknown", str(error_info))

            if response.status_code == 500:
                response.raise_for_status()

            return data.get("result")

        except httpx.TimeoutException as e:
            logger.error(f"RPC call timed out: {method} - {e}")
            raise
        except httpx.HTTPError as e:
            logger.error(f"RPC call failed: {method} - {e}")
            raise

    async def post(self, request: WalletRequest[T]) -> RpcResult[T]:
        logger.debug(f"RPC request: {request.method}")
        try:
            raw = await self._rpc_call(request.method, request.params())
        except (WalletRpcError, httpx.HTTPError) as e:
            return RpcResult.failure(str(e) or type(e).__name__)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON from wallet for {request.method}: {e}")
            return RpcResult.failure(f"Invalid JSON response: {e}")

        if SENSITIVE_LOGGING:
            logger.debug(f"RPC result for {request.method}: {raw}")

        try:
            return RpcResult.success(request.parse(raw))
        except ValidationError as e:
            logger.error(f"Unexpected {request.method} response: {e}")
            return RpcResult.failure(f"Unexpected response for {request.method}: {e}")

    async def close(self) -> None:
        await self.client.aclose()
