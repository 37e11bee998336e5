"""Transaction signers.

The engine never constructs a signer for a user; callers pass one in. Any
object with an address, a chain_id and an async send_transaction() works.
LocalAccountSigner is the server-side implementation backed by a private key.
"""

import asyncio
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Optional

from swapengine.chains import get_chain
from swapengine.config import get_settings

logger = logging.getLogger(__name__)


class Signer(ABC):
    """Capability that signs and broadcasts chain-targeted transactions."""

    @property
    @abstractmethod
    def address(self) -> str:
        """Address transactions are sent from."""

    @property
    @abstractmethod
    def chain_id(self) -> int:
        """Chain the signer is currently connected to."""

    @abstractmethod
    async def send_transaction(self, tx: dict) -> str:
        """Sign and broadcast a transaction, returning its hash.

        `tx` holds at least `to` and `data`; it may carry `value`, `gas` and
        `gasPrice`. Raises when the signer declines.
        """


class LocalAccountSigner(Signer):
    """Signer for EVM chains backed by a local private key."""

    # Class-level nonce cache shared by every signer in the process
    _nonce_cache: dict[tuple[int, str], int] = {}
    _nonce_lock = threading.Lock()

    def __init__(self, private_key: str, chain_id: int, rpc_url: Optional[str] = None, web3=None):
        from eth_account import Account

        self._account = Account.from_key(private_key)
        self._chain_id = chain_id
        if rpc_url is None:
            chain = get_chain(chain_id)
            rpc_url = chain.rpc_url if chain else ""
        self.rpc_url = rpc_url
        self._web3 = web3

    @classmethod
    def from_settings(cls, chain_id: int) -> "LocalAccountSigner":
        """Build a signer from the configured signer_private_key."""
        private_key = get_settings().signer_private_key
        if not private_key:
            raise ValueError("SIGNER_PRIVATE_KEY is not configured")
        return cls(private_key, chain_id)

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def chain_id(self) -> int:
        return self._chain_id

    @property
    def web3(self):
        """Lazy load web3 instance."""
        if self._web3 is None:
            from web3 import Web3
            self._web3 = Web3(Web3.HTTPProvider(self.rpc_url))
        return self._web3

    def _get_next_nonce(self) -> int:
        """Get next nonce with thread-safe caching.

        Concurrent sends from one address would otherwise reuse the pending
        nonce. Retries the RPC read a few times before giving up.
        """
        max_retries = 3
        key = (self._chain_id, self.address)

        with self._nonce_lock:
            chain_nonce = None
            last_error = None

            for attempt in range(max_retries):
                try:
                    chain_nonce = self.web3.eth.get_transaction_count(self.address, "pending")
                    break
                except Exception as e:
                    last_error = e
                    if attempt < max_retries - 1:
                        logger.warning(f"RPC error getting nonce (attempt {attempt + 1}): {e}")
                        time.sleep(1 * (attempt + 1))

            if chain_nonce is None:
                raise RuntimeError(f"Failed to get nonce after {max_retries} attempts: {last_error}")

            # Cached nonce is higher while our own transactions are pending
            next_nonce = max(chain_nonce, self._nonce_cache.get(key, 0))
            self._nonce_cache[key] = next_nonce + 1
            return next_nonce

    def _reset_nonce_cache(self) -> None:
        with self._nonce_lock:
            self._nonce_cache.pop((self._chain_id, self.address), None)

    def _sign_and_send(self, tx: dict) -> str:
        tx_params = dict(tx)
        tx_params.setdefault("from", self.address)
        tx_params.setdefault("value", 0)
        tx_params.setdefault("chainId", self._chain_id)

        if "nonce" not in tx_params:
            tx_params["nonce"] = self._get_next_nonce()
        if "gas" not in tx_params:
            tx_params["gas"] = self.web3.eth.estimate_gas(tx_params)
        if "gasPrice" not in tx_params and "maxFeePerGas" not in tx_params:
            tx_params["gasPrice"] = self.web3.eth.gas_price

        signed_tx = self._account.sign_transaction(tx_params)

        try:
            # web3 6.x+ uses raw_transaction, older versions use rawTransaction
            raw_tx = getattr(signed_tx, "raw_transaction", None) or signed_tx.rawTransaction
            tx_hash = self.web3.eth.send_raw_transaction(raw_tx)
        except Exception:
            # Next transaction must start from a fresh nonce
            self._reset_nonce_cache()
            raise

        tx_hash_hex = tx_hash.hex()
        if not tx_hash_hex.startswith("0x"):
            tx_hash_hex = f"0x{tx_hash_hex}"
        logger.info(f"Sent transaction {tx_hash_hex} on chain {self._chain_id}")
        return tx_hash_hex

    async def send_transaction(self, tx: dict) -> str:
        return await asyncio.to_thread(self._sign_and_send, tx)
