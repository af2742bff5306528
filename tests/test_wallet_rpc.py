"""
Tests for the JSON-RPC wallet gateway.
"""

from __future__ import annotations

import base64
import json
from decimal import Decimal

import httpx
import pytest

from coincontrol.backends.base import (
    GetInfoRequest,
    ListUnspentRequest,
    RpcResult,
    SendFromRequest,
    StakingInfoRequest,
    WalletPassphraseRequest,
    WalletRpcError,
)
from coincontrol.backends.wallet_rpc import WalletRpcClient, encode_json


def rpc_response(result: str, status_code: int = 200, error: str = "null") -> httpx.Response:
    body = f'{{"result": {result}, "error": {error}, "id": 1}}'
    return httpx.Response(status_code, content=body.encode())


def make_client(handler) -> WalletRpcClient:  # type: ignore[no-untyped-def]
    return WalletRpcClient(
        rpc_url="http://127.0.0.1:33821/",
        rpc_user="user",
        rpc_password="pass",
        transport=httpx.MockTransport(handler),
    )


class TestRequests:
    @pytest.mark.asyncio
    async def test_payload_and_auth(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return rpc_response('{"version": "v1.0.1.3-g", "fee": 0.0001}')

        client = make_client(handler)
        try:
            await client.post(GetInfoRequest())
        finally:
            await client.close()

        request = seen[0]
        assert request.url.host == "127.0.0.1"
        assert request.url.port == 33821
        payload = json.loads(request.content)
        assert payload["method"] == "getinfo"
        assert payload["params"] == []
        expected = base64.b64encode(b"user:pass").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"

    @pytest.mark.asyncio
    async def test_request_ids_increase(self) -> None:
        ids: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            ids.append(json.loads(request.content)["id"])
            return rpc_response("null")

        client = make_client(handler)
        try:
            await client.post(WalletPassphraseRequest("pw", 10, True))
            await client.post(WalletPassphraseRequest("pw", 10, True))
        finally:
            await client.close()

        assert ids == [1, 2]

    @pytest.mark.asyncio
    async def test_walletpassphrase_params(self) -> None:
        params: list[list] = []

        def handler(request: httpx.Request) -> httpx.Response:
            params.append(json.loads(request.content)["params"])
            return rpc_response("null")

        client = make_client(handler)
        try:
            result = await client.post(WalletPassphraseRequest("secret", 180_000, True))
        finally:
            await client.close()

        assert params == [["secret", 180_000, True]]
        assert result.ok
        assert result.value == ""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "amount",
        ["1234.56789012", "7.9", "1234567890.12345678", "9876543210.00000001", "21000000000"],
    )
    async def test_sendfrom_amount_is_exact(self, amount: str) -> None:
        bodies: list[bytes] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(request.content)
            return rpc_response('"' + "ab" * 32 + '"')

        client = make_client(handler)
        try:
            result = await client.post(SendFromRequest("staking", "LdestAddr", Decimal(amount)))
        finally:
            await client.close()

        assert result.value == "ab" * 32
        params = json.loads(bodies[0], parse_float=Decimal)["params"]
        assert params[:2] == ["staking", "LdestAddr"]
        assert Decimal(params[2]) == Decimal(amount)
        assert amount.encode() in bodies[0]


class TestEncodeJson:
    def test_decimal_written_as_plain_number(self) -> None:
        assert encode_json([Decimal("0.00000001"), Decimal("1E+1")]) == "[0.00000001, 10]"

    def test_payload_round_trips(self) -> None:
        payload = {"jsonrpc": "1.0", "id": 3, "method": "sendfrom", "params": ["a", True, None]}
        assert json.loads(encode_json(payload)) == payload

    def test_non_finite_decimal_rejected(self) -> None:
        with pytest.raises(ValueError):
            encode_json(Decimal("NaN"))


class TestResponses:
    @pytest.mark.asyncio
    async def test_amounts_decoded_as_decimal(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return rpc_response(
                '[{"txid": "aa", "vout": 0, "address": "L1", "account": "staking",'
                ' "amount": 0.1, "confirmations": 12},'
                ' {"txid": "bb", "vout": 1, "address": "L2", "account": "staking",'
                ' "amount": 0.2, "confirmations": 15}]'
            )

        client = make_client(handler)
        try:
            result = await client.post(ListUnspentRequest())
        finally:
            await client.close()

        outputs = result.unwrap()
        assert [o.amount for o in outputs] == [Decimal("0.1"), Decimal("0.2")]
        assert outputs[0].amount + outputs[1].amount == Decimal("0.3")

    @pytest.mark.asyncio
    async def test_staking_info(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return rpc_response(
                '{"enabled": true, "staking": true, "errors": "", "expectedtime": 86400}'
            )

        client = make_client(handler)
        try:
            result = await client.post(StakingInfoRequest())
        finally:
            await client.close()

        assert result.unwrap().expected_time_seconds == 86400

    @pytest.mark.asyncio
    async def test_rpc_error_becomes_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return rpc_response(
                "null",
                status_code=500,
                error='{"code": -14, "message": "The wallet passphrase entered was incorrect."}',
            )

        client = make_client(handler)
        try:
            result = await client.post(WalletPassphraseRequest("bad", 10, True))
        finally:
            await client.close()

        assert not result.ok
        assert result.value is None
        assert "-14" in (result.error or "")
        assert "incorrect" in (result.error or "")

    @pytest.mark.asyncio
    async def test_http_error_becomes_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, content=b"")

        client = make_client(handler)
        try:
            result = await client.post(GetInfoRequest())
        finally:
            await client.close()

        assert not result.ok
        assert "401" in (result.error or "")

    @pytest.mark.asyncio
    async def test_connection_error_becomes_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        client = make_client(handler)
        try:
            result = await client.post(GetInfoRequest())
        finally:
            await client.close()

        assert not result.ok
        assert "Connection refused" in (result.error or "")

    @pytest.mark.asyncio
    async def test_unexpected_shape_becomes_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return rpc_response('{"blocks": 100}')

        client = make_client(handler)
        try:
            result = await client.post(GetInfoRequest())
        finally:
            await client.close()

        assert not result.ok
        assert "getinfo" in (result.error or "")

    @pytest.mark.asyncio
    async def test_invalid_json_becomes_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>proxy error</html>")

        client = make_client(handler)
        try:
            result = await client.post(GetInfoRequest())
        finally:
            await client.close()

        assert not result.ok
        assert "Invalid JSON" in (result.error or "")

    @pytest.mark.asyncio
    async def test_rpc_call_raises_wallet_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return rpc_response("null", error='{"code": -32601, "message": "Method not found"}')

        client = make_client(handler)
        try:
            with pytest.raises(WalletRpcError, match="Method not found") as exc_info:
                await client._rpc_call("getnothing")
        finally:
            await client.close()

        assert exc_info.value.code == -32601


class TestRpcResult:
    def test_success(self) -> None:
        result = RpcResult.success(Decimal("0.1"))
        assert result.ok
        assert result.unwrap() == Decimal("0.1")

    def test_failure_has_no_value(self) -> None:
        result: RpcResult[Decimal] = RpcResult.failure("boom")
        assert not result.ok
        assert result.value is None
        with pytest.raises(WalletRpcError, match="boom"):
            result.unwrap()

    def test_failure_without_message(self) -> None:
        assert RpcResult.failure("").error == "unknown error"

    def test_zero_is_a_value(self) -> None:
        assert RpcResult.success(Decimal("0")).ok
