"""
coincontrol - Automatic coin control for proof-of-stake wallets

Consolidates the mature unspent outputs of one wallet account while keeping
the wallet unlocked for staking.
"""

__version__ = "1.0.0"

from coincontrol.backends import RpcResult, WalletGateway, WalletRpcClient, WalletRpcError
from coincontrol.config import CoinControlConfig
from coincontrol.constants import (
    COMPATIBLE_WALLET_VERSIONS,
    DEFAULT_CONFIRMATIONS_REQUIRED,
    DEFAULT_INTERVAL_MS,
)
from coincontrol.engine import CycleEngine, select_eligible
from coincontrol.messages import LoguruMessageSink, MessageSink
from coincontrol.models import (
    CoinSelection,
    ConsolidationTarget,
    CycleOutcome,
    CycleReport,
    StakingStatus,
    UnspentOutput,
    WalletInfo,
)
from coincontrol.scheduler import ErrorPolicy, Scheduler

__all__ = [
    "COMPATIBLE_WALLET_VERSIONS",
    "DEFAULT_CONFIRMATIONS_REQUIRED",
    "DEFAULT_INTERVAL_MS",
    "CoinControlConfig",
    "CoinSelection",
    "ConsolidationTarget",
    "CycleEngine",
    "CycleOutcome",
    "CycleReport",
    "ErrorPolicy",
    "LoguruMessageSink",
    "MessageSink",
    "RpcResult",
    "Scheduler",
    "StakingStatus",
    "UnspentOutput",
    "WalletGateway",
    "WalletInfo",
    "WalletRpcClient",
    "WalletRpcError",
    "select_eligible",
]
