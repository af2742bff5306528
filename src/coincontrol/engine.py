"""
Coin control cycle.

One cycle unlocks the wallet for staking, reports staking status, looks for
mature outputs of the configured account, and when there are at least two,
sends their total (minus the wallet fee) back to the address of the first one.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta
from decimal import Decimal

from coincontrol.backends.base import (
    GetInfoRequest,
    ListUnspentRequest,
    RpcResult,
    SendFromRequest,
    StakingInfoRequest,
    WalletGateway,
    WalletPassphraseRequest,
)
from coincontrol.constants import (
    COIN_UNIT,
    DEFAULT_CONFIRMATIONS_REQUIRED,
    DEFAULT_INTERVAL_MS,
    SPEND_UNLOCK_TIMEOUT,
    STAKING_UNLOCK_MULTIPLIER,
)
from coincontrol.messages import MessageSink
from coincontrol.models import (
    CoinSelection,
    ConsolidationTarget,
    CycleOutcome,
    CycleReport,
    UnspentOutput,
)


def select_eligible(
    outputs: Iterable[UnspentOutput],
    target: ConsolidationTarget,
    min_confirmations: int = DEFAULT_CONFIRMATIONS_REQUIRED,
) -> CoinSelection:
    """
    Pick the outputs of ``target.account`` that may be consolidated.

    Outputs are scanned in listing order. The first output of the account with
    fewer than ``min_confirmations`` stops the scan: everything picked so far is
    dropped and the full listing is returned with ``waiting_on`` set.
    """
    listing = list(outputs)
    eligible: list[UnspentOutput] = []
    for output in listing:
        if not target.matches(output.account):
            continue
        if output.confirmations < min_confirmations:
            return CoinSelection(outputs=listing, waiting_on=output)
        eligible.append(output)
    return CoinSelection(outputs=eligible)


class CycleEngine:
    """
    Runs coin control cycles against a wallet gateway.

    Every step that talks to the wallet is an abort point: a failed call is
    reported through the message sink and the cycle ends with an ``aborted``
    report. Nothing is raised for RPC failures.
    """

    def __init__(
        self,
        gateway: WalletGateway,
        target: ConsolidationTarget,
        messages: MessageSink,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        min_confirmations: int = DEFAULT_CONFIRMATIONS_REQUIRED,
    ):
        self.gateway = gateway
        self.target = target
        self.messages = messages
        self.interval_ms = interval_ms
        self.min_confirmations = min_confirmations

    @property
    def staking_unlock_timeout(self) -> int:
        return self.interval_ms * STAKING_UNLOCK_MULTIPLIER

    async def run_cycle(self) -> CycleReport:
        self.messages.separator()
        self.messages.info(f"Account: {self.target.account}.")

        if not await self.unlock_for_staking():
            return CycleReport(CycleOutcome.ABORTED)

        if not await self.check_staking_info():
            return CycleReport(CycleOutcome.ABORTED)

        listing = await self.list_unspent()
        if not listing.ok:
            return CycleReport(CycleOutcome.ABORTED)

        selection = self.select(listing.unwrap())
        if selection.deferred:
            return CycleReport(CycleOutcome.DEFERRED, selection=selection)
        if len(selection.outputs) < 2:
            return CycleReport(CycleOutcome.NO_OP, selection=selection)

        self.messages.info("Coin control needed.  Starting...")

        report = CycleReport(CycleOutcome.ABORTED, selection=selection)
        report.gross_amount = selection.total
        self.messages.info(f"Amount: {report.gross_amount} {COIN_UNIT}.")

        fee = await self.get_fee()
        if not fee.ok:
            return report
        report.fee = fee.unwrap()

        report.amount_after_fee = report.gross_amount - report.fee
        self.messages.info(f"Amount After Fee: {report.amount_after_fee} {COIN_UNIT}.")
        if report.amount_after_fee <= 0:
            self.messages.warning("Fee is not less than the amount.  Skipping coin control.")
            report.outcome = CycleOutcome.NO_OP
            return report

        if not await self.unlock(SPEND_UNLOCK_TIMEOUT, staking_only=False):
            return report

        txid = await self.send_from(selection.outputs[0].address, report.amount_after_fee)
        if txid is None:
            return report
        report.txid = txid
        report.outcome = CycleOutcome.CONSOLIDATED

        # Staking resumes on the next cycle's unlock if this one fails
        if await self.unlock_for_staking():
            self.messages.info("Wallet unlocked for staking.")
        self.messages.info("Coin control complete!")
        return report

    async def unlock_for_staking(self) -> bool:
        return await self.unlock(self.staking_unlock_timeout, staking_only=True)

    async def unlock(self, timeout: int, staking_only: bool) -> bool:
        request = WalletPassphraseRequest(
            passphrase=self.target.passphrase, timeout=timeout, staking_only=staking_only
        )
        result = await self.gateway.post(request)
        if not result.ok:
            self.messages.error("Failed to unlock wallet!  Is the passphrase correct?")
            self.messages.post_error(request, result.error)
            return False

        unlock_error = result.unwrap()
        if unlock_error:
            self.messages.error(f"Unlock request returned error: {unlock_error}")
            return False

        return True

    async def check_staking_info(self) -> bool:
        request = StakingInfoRequest()
        result = await self.gateway.post(request)
        if not result.ok:
            self.messages.post_error(request, result.error)
            return False

        status = result.unwrap()
        if not status.enabled:
            self.messages.warning("Staking is disabled!")

        self.messages.info(f"Staking: {'Yes' if status.staking else 'No'}.")

        if status.staking and status.expected_time_seconds is not None:
            expected = timedelta(seconds=status.expected_time_seconds)
            hours = expected.seconds // 3600
            self.messages.info(
                f"Expected time to earn reward: {expected.days} days {hours} hours."
            )

        if status.errors:
            self.messages.error(f"Staking errors found: {status.errors}")

        return True

    async def list_unspent(self) -> RpcResult[list[UnspentOutput]]:
        request = ListUnspentRequest()
        result = await self.gateway.post(request)
        if not result.ok:
            self.messages.post_error(request, result.error)
        return result

    def select(self, outputs: list[UnspentOutput]) -> CoinSelection:
        selection = select_eligible(outputs, self.target, self.min_confirmations)

        waiting = selection.waiting_on
        if waiting is not None:
            self.messages.info(
                f"Waiting for more confirmations: {waiting.confirmations}/"
                f"{self.min_confirmations} {waiting.amount} {COIN_UNIT} {waiting.txid}"
            )
        elif not selection.outputs:
            self.messages.info("No unspent transactions.")
        elif len(selection.outputs) == 1:
            self.messages.info("Only one unspent transaction.")

        return selection

    async def get_fee(self) -> RpcResult[Decimal]:
        request = GetInfoRequest()
        result = await self.gateway.post(request)
        if not result.ok:
            self.messages.post_error(request, result.error)
            return RpcResult.failure(result.error or "")

        fee = result.unwrap().fee
        self.messages.info(f"Fee: {fee} {COIN_UNIT}.")
        return RpcResult.success(fee)

    async def send_from(self, to_address: str, amount: Decimal) -> str | None:
        request = SendFromRequest(
            from_account=self.target.account, to_address=to_address, amount=amount
        )
        result = await self.gateway.post(request)
        if not result.ok:
            self.messages.post_error(request, result.error)
            return None

        txid = result.unwrap()
        self.messages.info(f"Coin control transaction sent: {txid}.")
        return txid
