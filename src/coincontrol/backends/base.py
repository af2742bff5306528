"""
Wallet gateway interface and RPC request definitions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import TypeAdapter

from coincontrol.models import StakingStatus, UnspentOutput, WalletInfo

T = TypeVar("T")

_UNSPENT_LIST = TypeAdapter(list[UnspentOutput])


class WalletRpcError(Exception):
    """Error object returned by the wallet for an RPC call."""

    def __init__(self, code: int | str, message: str):
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message


@dataclass(frozen=True)
class RpcResult(Generic[T]):
    """
    Outcome of a gateway call: either a value or an error message, never both.

    A failed call is kept apart from any legitimate value so callers cannot
    mistake a failure for data (e.g. a fee of -1).
    """

    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> RpcResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> RpcResult[T]:
        return cls(error=error or "unknown error")

    def unwrap(self) -> T:
        if self.error is not None:
            raise WalletRpcError("unwrap", self.error)
        return self.value  # type: ignore[return-value]


@dataclass(frozen=True)
class WalletRequest(Generic[T]):
    """Base class for wallet RPC requests: a method name, params, and a parser."""

    method: ClassVar[str]

    def params(self) -> list[Any]:
        return []

    def parse(self, result: Any) -> T:
        return result  # type: ignore[no-any-return]


@dataclass(frozen=True)
class GetInfoRequest(WalletRequest[WalletInfo]):
    method: ClassVar[str] = "getinfo"

    def parse(self, result: Any) -> WalletInfo:
        return WalletInfo.model_validate(result)


@dataclass(frozen=True)
class StakingInfoRequest(WalletRequest[StakingStatus]):
    method: ClassVar[str] = "getstakinginfo"

    def parse(self, result: Any) -> StakingStatus:
        return StakingStatus.model_validate(result)


@dataclass(frozen=True)
class ListUnspentRequest(WalletRequest[list[UnspentOutput]]):
    method: ClassVar[str] = "listunspent"

    def parse(self, result: Any) -> list[UnspentOutput]:
        return _UNSPENT_LIST.validate_python(result or [])


@dataclass(frozen=True)
class WalletPassphraseRequest(WalletRequest[str]):
    """
    Unlock the wallet for ``timeout`` seconds.

    The wallet answers null on success; any string it returns is an unlock
    error message.
    """

    method: ClassVar[str] = "walletpassphrase"

    passphrase: str = field(repr=False)
    timeout: int
    staking_only: bool

    def params(self) -> list[Any]:
        return [self.passphrase, self.timeout, self.staking_only]

    def parse(self, result: Any) -> str:
        return "" if result is None else str(result)


@dataclass(frozen=True)
class SendFromRequest(WalletRequest[str]):
    """Send ``amount`` from an account to an address; returns the txid."""

    method: ClassVar[str] = "sendfrom"

    from_account: str
    to_address: str
    amount: Decimal

    def params(self) -> list[Any]:
        return [self.from_account, self.to_address, self.amount]

    def parse(self, result: Any) -> str:
        return str(result)


class WalletGateway(ABC):
    """
    Abstract request/response channel to the wallet.

    Implementations must not raise for transport or RPC failures; the error
    travels back in the returned ``RpcResult``.
    """

    @abstractmethod
    async def post(self, request: WalletRequest[T]) -> RpcResult[T]:
        """Execute one RPC request"""

    async def close(self) -> None:
        """Close gateway connection"""
        pass
