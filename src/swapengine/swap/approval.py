"""ERC-20 allowance checks and approvals."""

import logging
from typing import Optional

from swapengine.config import get_settings
from swapengine.exceptions import ApprovalFailedError
from swapengine.swap.abis import ERC20_ABI
from swapengine.swap.client import ChainClient
from swapengine.swap.execution import wait_for_transaction
from swapengine.swap.models import ApprovalStatus, PendingTransaction
from swapengine.swap.signer import Signer

logger = logging.getLogger(__name__)


async def check_approval(
    client: ChainClient,
    token: str,
    owner: str,
    spender: str,
    amount_needed: int,
) -> ApprovalStatus:
    """Read the live allowance and compare it to amount_needed."""
    allowance = int(await client.call(token, ERC20_ABI, "allowance", owner, spender))
    return ApprovalStatus(
        is_approved=allowance >= amount_needed,
        current_allowance=allowance,
        required_allowance=amount_needed,
    )


async def approve(
    client: ChainClient,
    token: str,
    spender: str,
    amount: int,
    signer: Signer,
    gas_price: Optional[int] = None,
) -> Optional[PendingTransaction]:
    """Approve spender for exactly `amount`, only if the allowance is short.

    Returns the pending approval, or None when no transaction was needed.
    """
    status = await check_approval(client, token, signer.address, spender, amount)
    if status.is_approved:
        logger.debug(f"Allowance for {token} -> {spender} already {status.current_allowance}")
        return None

    data = client.encode_call(token, ERC20_ABI, "approve", spender, amount)
    tx = {
        "to": token,
        "data": data,
        "value": 0,
        "gas": get_settings().approval_gas_limit,
    }
    if gas_price is not None:
        tx["gasPrice"] = gas_price

    logger.info(f"Approving {spender} to spend {amount} of {token}")
    tx_hash = await signer.send_transaction(tx)
    return PendingTransaction(tx_hash=tx_hash, chain_id=client.chain_id, description="approval")


async def wait_for_approval(
    client: ChainClient,
    tx: PendingTransaction,
    confirmations: int = 1,
    timeout: Optional[float] = None,
) -> dict:
    """Wait for an approval; ApprovalFailedError on revert."""
    return await wait_for_transaction(
        client, tx, confirmations, timeout=timeout, revert_error=ApprovalFailedError
    )
