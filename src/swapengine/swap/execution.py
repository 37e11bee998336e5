"""Swap submission and bounded confirmation polling."""

import asyncio
import logging
from typing import Optional

from swapengine.config import get_settings
from swapengine.exceptions import ConfirmationTimeoutError, SwapFailedError, TransactionRevertedError
from swapengine.swap.abis import BROKER_ABI
from swapengine.swap.client import ChainClient
from swapengine.swap.models import ExchangeInfo, PendingTransaction
from swapengine.swap.signer import Signer

logger = logging.getLogger(__name__)


async def wait_for_transaction(
    client: ChainClient,
    tx: PendingTransaction,
    confirmations: int = 1,
    timeout: Optional[float] = None,
    poll_interval: Optional[float] = None,
    revert_error: type[TransactionRevertedError] = TransactionRevertedError,
) -> dict:
    """Poll until a transaction has `confirmations` blocks on top of it.

    Args:
        client: Read-only client for the transaction's chain
        tx: Transaction to wait for
        confirmations: Number of block confirmations required
        timeout: Maximum seconds to wait (defaults to confirmation_timeout)
        poll_interval: Seconds between polls (defaults to poll_interval)
        revert_error: Exception class raised when the receipt status is 0

    Returns:
        Transaction receipt dict

    Raises:
        ConfirmationTimeoutError: If not confirmed within timeout
        TransactionRevertedError: (or revert_error) if the transaction reverted
    """
    settings = get_settings()
    if timeout is None:
        timeout = settings.confirmation_timeout
    if poll_interval is None:
        poll_interval = settings.poll_interval

    loop = asyncio.get_running_loop()
    start_time = loop.time()

    while True:
        receipt = await client.get_transaction_receipt(tx.tx_hash)
        if receipt is not None:
            if receipt.get("status") == 0:
                raise revert_error(f"Transaction {tx.tx_hash} reverted ({tx.description})", tx.tx_hash)

            current_block = await client.block_number()
            confirms = current_block - receipt["blockNumber"] + 1
            if confirms >= confirmations:
                logger.info(f"Confirmed {tx.description} {tx.tx_hash} ({confirms} confirmations)")
                return receipt

        if loop.time() - start_time >= timeout:
            logger.warning(f"Timed out waiting for {tx.description} {tx.tx_hash}")
            raise ConfirmationTimeoutError(
                f"Transaction {tx.tx_hash} not confirmed after {timeout}s", tx.tx_hash
            )

        await asyncio.sleep(poll_interval)


async def wait_for_swap(
    client: ChainClient,
    tx: PendingTransaction,
    confirmations: int = 1,
    timeout: Optional[float] = None,
) -> dict:
    """Wait for a swap transaction; SwapFailedError on revert."""
    return await wait_for_transaction(
        client, tx, confirmations, timeout=timeout, revert_error=SwapFailedError
    )


async def execute_swap(
    client: ChainClient,
    registry: str,
    exchange: ExchangeInfo,
    from_token: str,
    to_token: str,
    amount_in: int,
    min_amount_out: int,
    signer: Signer,
    gas_price: Optional[int] = None,
) -> PendingTransaction:
    """Submit a broker swapIn call with the caller's output floor.

    The broker reverts the whole swap if it cannot deliver min_amount_out.
    """
    data = client.encode_call(
        registry,
        BROKER_ABI,
        "swapIn",
        exchange.provider,
        exchange.exchange_id,
        from_token,
        to_token,
        amount_in,
        min_amount_out,
    )

    tx = {
        "to": registry,
        "data": data,
        "value": 0,
        "gas": get_settings().swap_gas_limit,
    }
    if gas_price is not None:
        tx["gasPrice"] = gas_price

    logger.info(
        f"Submitting swap {from_token} -> {to_token} amount_in={amount_in} "
        f"min_out={min_amount_out} on chain {client.chain_id}"
    )
    tx_hash = await signer.send_transaction(tx)
    return PendingTransaction(tx_hash=tx_hash, chain_id=client.chain_id, description="swap")
