"""
Coin control CLI using Typer.
"""

from __future__ import annotations

import asyncio
import contextlib
import signal
import sys
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from pydantic import ValidationError

from coincontrol.backends.base import (
    GetInfoRequest,
    ListUnspentRequest,
    StakingInfoRequest,
    WalletGateway,
)
from coincontrol.backends.wallet_rpc import WalletRpcClient
from coincontrol.compat import is_compatible_version
from coincontrol.config import CoinControlConfig
from coincontrol.constants import (
    COIN_UNIT,
    COMPATIBLE_WALLET_VERSIONS,
    DEFAULT_CONFIRMATIONS_REQUIRED,
    DEFAULT_RPC_URL,
    EXIT_FATAL,
    EXIT_USAGE,
)
from coincontrol.engine import CycleEngine, select_eligible
from coincontrol.messages import LoguruMessageSink
from coincontrol.models import ConsolidationTarget
from coincontrol.scheduler import ErrorPolicy, Scheduler

app = typer.Typer(
    name="coincontrol",
    help="Automatic coin control for staking wallets",
    add_completion=False,
)


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )
    if log_file is not None:
        logger.add(log_file, level=level.upper(), rotation="10 MB", retention=5)


def run_async(coro):  # type: ignore[no-untyped-def]
    return asyncio.run(coro)


def create_gateway(config: CoinControlConfig) -> WalletRpcClient:
    return WalletRpcClient(
        rpc_url=config.rpc_url,
        rpc_user=config.rpc_user,
        rpc_password=config.rpc_password,
        timeout=config.rpc_timeout,
    )


async def run_service(config: CoinControlConfig, gateway: WalletGateway | None = None) -> bool:
    """
    Run coin control until a fatal failure or a shutdown signal.

    Returns False if the service stopped because of a fatal failure.
    """
    shutdown = asyncio.Event()
    messages = LoguruMessageSink(shutdown)
    gateway = gateway or create_gateway(config)

    engine = CycleEngine(
        gateway,
        config.target,
        messages,
        interval_ms=config.interval_ms,
        min_confirmations=config.min_confirmations,
    )
    scheduler = Scheduler(
        engine,
        messages,
        interval_ms=config.interval_ms,
        error_policy=config.error_policy,
        max_backoff_ms=config.max_backoff_ms,
    )

    loop = asyncio.get_running_loop()

    def shutdown_handler() -> None:
        logger.info("Received shutdown signal")
        shutdown.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        # Not available outside the main thread or on Windows
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, shutdown_handler)

    try:
        await scheduler.start()
        await shutdown.wait()
    finally:
        await scheduler.stop()
        await gateway.close()
        for sig in (signal.SIGTERM, signal.SIGINT):
            with contextlib.suppress(NotImplementedError, RuntimeError):
                loop.remove_signal_handler(sig)

    return not messages.failed


@app.command()
def run(
    rpc_user: Annotated[str, typer.Argument(help="Wallet RPC username")],
    rpc_password: Annotated[str, typer.Argument(help="Wallet RPC password")],
    account: Annotated[str, typer.Argument(help="Wallet account to consolidate")],
    passphrase: Annotated[str, typer.Argument(help="Wallet passphrase")],
    interval_ms: Annotated[
        int | None,
        typer.Argument(min=1, help="Milliseconds between cycles (default: 60000)"),
    ] = None,
    rpc_url: Annotated[
        str, typer.Option("--rpc-url", envvar="WALLET_RPC_URL", help="Wallet RPC URL")
    ] = DEFAULT_RPC_URL,
    error_policy: Annotated[
        ErrorPolicy,
        typer.Option(
            case_sensitive=False,
            envvar="COINCONTROL_ERROR_POLICY",
            help="On an unexpected cycle error: halt, or retry with backoff",
        ),
    ] = ErrorPolicy.HALT,
    log_level: Annotated[str, typer.Option("--log-level", "-l", envvar="LOG_LEVEL")] = "INFO",
    log_file: Annotated[
        Path | None, typer.Option("--log-file", help="Also write logs to this file")
    ] = None,
) -> None:
    """Run coin control for an account until stopped."""
    setup_logging(log_level, log_file)

    settings: dict[str, object] = {
        "rpc_url": rpc_url,
        "rpc_user": rpc_user.strip(),
        "rpc_password": rpc_password.strip(),
        "account": account.strip(),
        "passphrase": passphrase.strip(),
        "error_policy": error_policy,
    }
    if interval_ms is not None:
        settings["interval_ms"] = interval_ms

    try:
        config = CoinControlConfig(**settings)
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        raise typer.Exit(EXIT_USAGE)

    logger.info(f"Starting coin control for account '{config.account}' via {config.rpc_url}")

    try:
        ok = run_async(run_service(config))
    except KeyboardInterrupt:
        logger.info("Shutting down coin control...")
        return

    if not ok:
        raise typer.Exit(EXIT_FATAL)


@app.command()
def status(
    rpc_user: Annotated[str, typer.Argument(help="Wallet RPC username")],
    rpc_password: Annotated[str, typer.Argument(help="Wallet RPC password")],
    account: Annotated[str, typer.Argument(help="Wallet account to inspect")],
    rpc_url: Annotated[
        str, typer.Option("--rpc-url", envvar="WALLET_RPC_URL", help="Wallet RPC URL")
    ] = DEFAULT_RPC_URL,
    log_level: Annotated[str, typer.Option("--log-level", "-l", envvar="LOG_LEVEL")] = "WARNING",
) -> None:
    """Show wallet, staking and unspent output status without changing anything."""
    setup_logging(log_level)

    gateway = WalletRpcClient(
        rpc_url=rpc_url, rpc_user=rpc_user.strip(), rpc_password=rpc_password.strip()
    )
    ok = run_async(_show_status(gateway, account.strip()))
    if not ok:
        raise typer.Exit(EXIT_FATAL)


async def _show_status(gateway: WalletGateway, account: str) -> bool:
    try:
        info = await gateway.post(GetInfoRequest())
        if not info.ok:
            logger.error(f"Could not read wallet info: {info.error}")
            return False
        wallet = info.unwrap()
        compatible = is_compatible_version(wallet.version)
        verdict = "compatible" if compatible else "NOT compatible"
        typer.echo(f"\nWallet version: {wallet.version} ({verdict})")
        if not compatible:
            typer.echo(f"Compatible versions: {COMPATIBLE_WALLET_VERSIONS}")
        typer.echo(f"Fee: {wallet.fee} {COIN_UNIT}")

        staking = await gateway.post(StakingInfoRequest())
        if not staking.ok:
            logger.error(f"Could not read staking info: {staking.error}")
            return False
        stake = staking.unwrap()
        typer.echo(
            f"Staking: enabled={'yes' if stake.enabled else 'no'}, "
            f"active={'yes' if stake.staking else 'no'}"
        )
        if stake.errors:
            typer.echo(f"Staking errors: {stake.errors}")

        unspent = await gateway.post(ListUnspentRequest())
        if not unspent.ok:
            logger.error(f"Could not list unspent outputs: {unspent.error}")
            return False

        target = ConsolidationTarget(account=account, passphrase="")
        outputs = [o for o in unspent.unwrap() if target.matches(o.account)]
        typer.echo(f"\nUnspent outputs for account '{account}': {len(outputs)}")
        typer.echo("=" * 100)
        for output in outputs:
            typer.echo(
                f"  {output.txid}  {output.confirmations:>6} conf  "
                f"{output.amount:>20} {COIN_UNIT}  {output.address}"
            )
        typer.echo("=" * 100)

        selection = select_eligible(unspent.unwrap(), target, DEFAULT_CONFIRMATIONS_REQUIRED)
        if selection.waiting_on is not None:
            typer.echo(
                f"Waiting for confirmations on {selection.waiting_on.txid} before consolidating."
            )
        elif len(selection.outputs) >= 2:
            typer.echo(
                f"Would consolidate {len(selection.outputs)} outputs "
                f"({selection.total} {COIN_UNIT}) into {selection.outputs[0].address}."
            )
        else:
            typer.echo("Nothing to consolidate.")
        return True
    finally:
        await gateway.close()


def main() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":
    main()
