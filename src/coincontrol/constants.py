"""
Wallet and coin control constants.
"""

from __future__ import annotations

# Wallet builds the service is known to work with.
# NOTE: the check is "wallet version contained in this string", not the reverse.
COMPATIBLE_WALLET_VERSIONS = "v1.0.1.3-g"

# Every output of the account must have at least this many confirmations
# before any of them are consolidated
DEFAULT_CONFIRMATIONS_REQUIRED = 10

# Delay between the end of one cycle and the start of the next
DEFAULT_INTERVAL_MS = 60_000  # 1 minute

# Staking unlock timeout is the interval multiplied by this factor, so the
# wallet stays unlocked for staking across a couple of missed cycles
STAKING_UNLOCK_MULTIPLIER = 3

# Full (spending) unlock is kept as short as possible
SPEND_UNLOCK_TIMEOUT = 5

# Upper bound for the retry delay of the backoff error policy
DEFAULT_MAX_BACKOFF_MS = 15 * 60_000

# Timeout for a single RPC round trip (seconds)
DEFAULT_RPC_TIMEOUT = 30.0

DEFAULT_RPC_URL = "http://127.0.0.1:33821"

# Process exit codes. EXIT_USAGE matches click's code for bad arguments.
EXIT_FATAL = 1
EXIT_USAGE = 2

# Currency unit shown in log messages
COIN_UNIT = "LINDA"
