"""
Wallet gateway implementations.

Available gateways:
- WalletRpcClient: JSON-RPC over HTTP to the wallet daemon
"""

from coincontrol.backends.base import (
    GetInfoRequest,
    ListUnspentRequest,
    RpcResult,
    SendFromRequest,
    StakingInfoRequest,
    WalletGateway,
    WalletPassphraseRequest,
    WalletRequest,
    WalletRpcError,
)
from coincontrol.backends.wallet_rpc import WalletRpcClient

__all__ = [
    "GetInfoRequest",
    "ListUnspentRequest",
    "RpcResult",
    "SendFromRequest",
    "StakingInfoRequest",
    "WalletGateway",
    "WalletPassphraseRequest",
    "WalletRequest",
    "WalletRpcClient",
    "WalletRpcError",
]
