"""Read-only chain access over web3.

Confirmation polling and contract reads go through ChainClient, never through
the signer, so signers that cannot await their own broadcast still work.
Blocking web3 calls run in a worker thread.
"""

import asyncio
import logging
import threading
from typing import Any, Optional

from swapengine.chains import get_chain

logger = logging.getLogger(__name__)


class ChainClient:
    """Async wrapper around a web3 HTTP provider for one chain."""

    def __init__(self, chain_id: int, rpc_url: Optional[str] = None, web3=None):
        self.chain_id = chain_id
        if rpc_url is None:
            chain = get_chain(chain_id)
            rpc_url = chain.rpc_url if chain else ""
        self.rpc_url = rpc_url
        self._web3 = web3

    @property
    def web3(self):
        """Lazy load web3 instance."""
        if self._web3 is None:
            from web3 import Web3
            self._web3 = Web3(Web3.HTTPProvider(self.rpc_url))
        return self._web3

    def _contract(self, address: str, abi: list):
        from web3 import Web3
        return self.web3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    async def call(self, address: str, abi: list, fn_name: str, *args) -> Any:
        """Execute a view function and return its decoded output."""
        contract = self._contract(address, abi)
        fn = contract.get_function_by_name(fn_name)(*_checksum_args(args))
        return await asyncio.to_thread(fn.call)

    def encode_call(self, address: str, abi: list, fn_name: str, *args) -> str:
        """ABI-encode call data for a write function."""
        contract = self._contract(address, abi)
        # web3 7.x renamed encodeABI to encode_abi
        encode = getattr(contract, "encode_abi", None) or contract.encodeABI
        return encode(fn_name, args=list(_checksum_args(args)))

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[dict]:
        """Get a receipt, or None while the transaction is pending."""
        from web3.exceptions import TransactionNotFound

        try:
            receipt = await asyncio.to_thread(self.web3.eth.get_transaction_receipt, tx_hash)
        except TransactionNotFound:
            return None
        return dict(receipt) if receipt is not None else None

    async def block_number(self) -> int:
        return await asyncio.to_thread(lambda: self.web3.eth.block_number)

    async def gas_price(self) -> int:
        return await asyncio.to_thread(lambda: self.web3.eth.gas_price)


def _checksum_args(args) -> tuple:
    from web3 import Web3

    converted = []
    for arg in args:
        if isinstance(arg, str) and arg.startswith("0x") and len(arg) == 42:
            converted.append(Web3.to_checksum_address(arg))
        elif isinstance(arg, tuple):
            # Struct arguments
            converted.append(_checksum_args(arg))
        else:
            converted.append(arg)
    return tuple(converted)


class ChainClients:
    """Per-chain ChainClient cache shared by all strategies."""

    def __init__(self):
        self._clients: dict[int, ChainClient] = {}
        self._lock = threading.Lock()

    def get(self, chain_id: int) -> ChainClient:
        with self._lock:
            client = self._clients.get(chain_id)
            if client is None:
                logger.debug(f"Creating chain client for chain {chain_id}")
                client = ChainClient(chain_id)
                self._clients[chain_id] = client
            return client

    def register(self, client: ChainClient) -> None:
        """Install a pre-built client (used to inject custom providers)."""
        with self._lock:
            self._clients[client.chain_id] = client
