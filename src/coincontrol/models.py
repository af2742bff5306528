"""
Wallet data models using Pydantic for validation of RPC responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class WalletInfo(BaseModel):
    """Subset of the ``getinfo`` response used by coin control."""

    version: str
    fee: Decimal = Field(validation_alias=AliasChoices("fee", "paytxfee"))


class StakingStatus(BaseModel):
    """Snapshot of ``getstakinginfo``."""

    enabled: bool
    staking: bool
    expected_time_seconds: int | None = Field(
        default=None, validation_alias=AliasChoices("expectedtime", "expected_time_seconds")
    )
    errors: str | None = None


class UnspentOutput(BaseModel):
    """One entry of ``listunspent``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    account: str | None = None
    address: str
    amount: Decimal
    confirmations: int
    txid: str = Field(validation_alias=AliasChoices("txid", "transaction_id"))
    vout: int | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def _exact_amount(cls, v: object) -> object:
        # Floats only appear when a caller bypasses the Decimal-aware decoder
        if isinstance(v, float):
            return Decimal(repr(v))
        return v


class ConsolidationTarget(BaseModel):
    """Account to consolidate and the passphrase that unlocks its wallet."""

    model_config = ConfigDict(frozen=True)

    account: str
    passphrase: str = Field(repr=False)

    def matches(self, account: str | None) -> bool:
        """Case-insensitive account comparison; outputs without account never match."""
        if account is None:
            return False
        return account.casefold() == self.account.casefold()


class CycleOutcome(str, Enum):
    NO_OP = "no-op"
    DEFERRED = "deferred"
    CONSOLIDATED = "consolidated"
    ABORTED = "aborted"


@dataclass
class CoinSelection:
    """
    Result of scanning the unspent listing for one account.

    When ``waiting_on`` is set an immature output of the account was found
    and ``outputs`` holds the full, unfiltered listing.
    """

    outputs: list[UnspentOutput]
    waiting_on: UnspentOutput | None = None

    @property
    def deferred(self) -> bool:
        return self.waiting_on is not None

    @property
    def total(self) -> Decimal:
        return sum((o.amount for o in self.outputs), Decimal("0"))


@dataclass
class CycleReport:
    """What one coin control cycle did; used for logging and tests only."""

    outcome: CycleOutcome
    selection: CoinSelection | None = None
    gross_amount: Decimal | None = None
    fee: Decimal | None = None
    amount_after_fee: Decimal | None = None
    txid: str | None = None
