"""
Wallet compatibility check run once before any automation starts.
"""

from __future__ import annotations

from coincontrol.backends.base import GetInfoRequest, WalletGateway
from coincontrol.constants import COMPATIBLE_WALLET_VERSIONS
from coincontrol.messages import MessageSink


def is_compatible_version(version: str, allowed: str = COMPATIBLE_WALLET_VERSIONS) -> bool:
    """
    Return True if the wallet version is found inside the allow-list string.

    Containment runs "wallet version within allow-list", so a shorter version
    string such as "v1.0" is also accepted. Kept as-is until the supported
    versions are pinned down.
    """
    return version.lower() in allowed.lower()


async def check_wallet_compatibility(gateway: WalletGateway, messages: MessageSink) -> bool:
    """
    Fetch wallet info and verify the version. Reports through ``messages.fail``
    on any problem.
    """
    messages.info("Connecting and reading wallet info...")

    result = await gateway.post(GetInfoRequest())
    if not result.ok:
        messages.fail(f"Could not read wallet info: {result.error}")
        return False

    info = result.unwrap()
    messages.info("Wallet info retrieved!")
    messages.info("Checking for wallet compatibility...")

    if not is_compatible_version(info.version):
        messages.fail(f"Wallet version: '{info.version}' is not compatible!")
        messages.fail(f"See compatible versions: {COMPATIBLE_WALLET_VERSIONS}")
        return False

    messages.info("Wallet compatibility check complete!")
    return True
