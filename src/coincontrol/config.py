"""
Coin control service configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from coincontrol.constants import (
    DEFAULT_CONFIRMATIONS_REQUIRED,
    DEFAULT_INTERVAL_MS,
    DEFAULT_MAX_BACKOFF_MS,
    DEFAULT_RPC_TIMEOUT,
    DEFAULT_RPC_URL,
)
from coincontrol.models import ConsolidationTarget
from coincontrol.scheduler import ErrorPolicy


class CoinControlConfig(BaseModel):
    rpc_url: str = DEFAULT_RPC_URL
    rpc_user: str
    rpc_password: str = Field(repr=False)
    rpc_timeout: float = Field(default=DEFAULT_RPC_TIMEOUT, gt=0)

    account: str
    passphrase: str = Field(repr=False)

    interval_ms: int = Field(
        default=DEFAULT_INTERVAL_MS,
        ge=1,
        description="Delay between the end of one cycle and the start of the next",
    )
    min_confirmations: int = Field(default=DEFAULT_CONFIRMATIONS_REQUIRED, ge=1)

    # Behaviour when a cycle raises: halt scheduling or retry with backoff
    error_policy: ErrorPolicy = ErrorPolicy.HALT
    max_backoff_ms: int = Field(default=DEFAULT_MAX_BACKOFF_MS, ge=1)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_config(self) -> CoinControlConfig:
        """Validate configuration after initialization."""
        if not self.account.strip():
            raise ValueError("account must not be empty")
        if not self.passphrase.strip():
            raise ValueError("passphrase must not be empty")
        return self

    @property
    def target(self) -> ConsolidationTarget:
        return ConsolidationTarget(account=self.account, passphrase=self.passphrase)
