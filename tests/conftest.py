"""Pytest configuration and fixtures."""

import os
from decimal import Decimal
from typing import Any, Optional

import pytest

# Set test environment before settings are first loaded
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"
os.environ["POLL_INTERVAL"] = "0"
os.environ["CONFIRMATION_TIMEOUT"] = "1"
os.environ["LIFI_API_KEY"] = ""
os.environ["ENABLE_PERFORMANCE_TRACKING"] = "true"
os.environ["BRIDGE_WAIT_FOR_DESTINATION"] = "false"
os.environ.pop("SIGNER_PRIVATE_KEY", None)

from swapengine.chains import CELO_MAINNET_ID, get_broker_address, get_token_address, is_celo
from swapengine.config import get_settings
from swapengine.routing.base import SwapStrategy
from swapengine.swap.client import ChainClients
from swapengine.swap.models import SwapEstimate, SwapResult
from swapengine.swap.signer import Signer

get_settings.cache_clear()

USER = "0x1111111111111111111111111111111111111111"
PROVIDER = "0x2222222222222222222222222222222222222222"
ONE = 10**18


class FakeChainClient:
    """In-memory stand-in for ChainClient.

    Contract reads are answered from handlers keyed by (address, function);
    a handler is either a value or a callable taking the call arguments.
    """

    def __init__(self, chain_id: int = CELO_MAINNET_ID):
        self.chain_id = chain_id
        self.handlers: dict[tuple[str, str], Any] = {}
        self.receipts: dict[str, dict] = {}
        self.current_block = 100
        self.gas_price_wei = 5 * 10**9
        self.calls: list[tuple[str, str, tuple]] = []

    def on(self, address: str, fn_name: str, result: Any) -> None:
        self.handlers[(address.lower(), fn_name)] = result

    async def call(self, address: str, abi: list, fn_name: str, *args) -> Any:
        self.calls.append((address, fn_name, args))
        handler = self.handlers[(address.lower(), fn_name)]
        return handler(*args) if callable(handler) else handler

    def encode_call(self, address: str, abi: list, fn_name: str, *args) -> dict:
        return {"fn": fn_name, "args": args}

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[dict]:
        return self.receipts.get(tx_hash)

    async def block_number(self) -> int:
        return self.current_block

    async def gas_price(self) -> int:
        return self.gas_price_wei


class FakeSigner(Signer):
    """Signer that records transactions and mines them on FakeChainClients.

    revert_on holds 1-based send indices whose receipts report a revert.
    With mine=False no receipt is ever produced.
    """

    def __init__(
        self,
        clients: dict[int, FakeChainClient],
        chain_id: int = CELO_MAINNET_ID,
        address: str = USER,
        revert_on: tuple[int, ...] = (),
        reject: bool = False,
        mine: bool = True,
    ):
        self.clients = clients
        self._chain_id = chain_id
        self._address = address
        self.revert_on = set(revert_on)
        self.reject = reject
        self.mine = mine
        self.sent: list[dict] = []

    @property
    def address(self) -> str:
        return self._address

    @property
    def chain_id(self) -> int:
        return self._chain_id

    async def send_transaction(self, tx: dict) -> str:
        if self.reject:
            raise RuntimeError("User rejected the request")
        self.sent.append(tx)
        tx_hash = f"0x{len(self.sent):064x}"
        if self.mine:
            client = self.clients[self._chain_id]
            status = 0 if len(self.sent) in self.revert_on else 1
            client.receipts[tx_hash] = {"status": status, "blockNumber": client.current_block}
        return tx_hash

    def sent_functions(self) -> list[str]:
        return [tx["data"]["fn"] for tx in self.sent if isinstance(tx["data"], dict)]


def celo_token(symbol: str) -> str:
    return get_token_address(CELO_MAINNET_ID, symbol)


@pytest.fixture
def celo_client() -> FakeChainClient:
    return FakeChainClient(CELO_MAINNET_ID)


@pytest.fixture
def mento_market(celo_client) -> FakeChainClient:
    """Celo broker with CUSD/CEUR and CUSD/CREAL markets quoting 98%."""
    broker = get_broker_address(CELO_MAINNET_ID)
    cusd, ceur, creal = celo_token("CUSD"), celo_token("CEUR"), celo_token("CREAL")

    celo_client.on(broker, "getExchangeProviders", [PROVIDER])
    celo_client.on(PROVIDER, "getExchanges", [
        (b"\x01" * 32, [cusd, ceur]),
        (b"\x02" * 32, [cusd, creal]),
    ])
    celo_client.on(
        broker, "getAmountOut",
        lambda provider, exchange_id, token_in, token_out, amount: amount * 98 // 100,
    )
    for token in (cusd, ceur, creal):
        celo_client.on(token, "allowance", 0)
    return celo_client


@pytest.fixture
def chain_clients(celo_client) -> ChainClients:
    clients = ChainClients()
    clients.register(celo_client)
    return clients


class StubStrategy(SwapStrategy):
    """Strategy with scripted supports/execute behaviour."""

    def __init__(self, name, supports=lambda p: True, outcome="success", output="1"):
        self._name = name
        self._supports = supports
        self.outcome = outcome
        self.output = Decimal(output)
        self.executed = 0
        self.estimated = 0

    @property
    def name(self):
        return self._name

    def supports(self, params):
        return self._supports(params)

    async def validate(self, params):
        return True

    async def get_estimate(self, params):
        self.estimated += 1
        return SwapEstimate(
            expected_output=self.output,
            minimum_output=self.output,
            price_impact_percent=Decimal("0"),
            gas_cost_estimate=Decimal("0"),
            strategy=self.name,
        )

    async def execute(self, params, signer, callbacks=None):
        self.executed += 1
        if isinstance(self.outcome, Exception):
            raise self.outcome
        if self.outcome == "failed":
            return SwapResult.failed("pool drained", "swap_error", self.name)
        return SwapResult(success=True, tx_hash=f"0x{self.name}", strategy=self.name)


def celo_same_chain(params):
    return is_celo(params.from_chain_id) and params.from_chain_id == params.to_chain_id


def same_chain(params):
    return params.from_chain_id == params.to_chain_id


def cross_chain(params):
    return params.from_chain_id != params.to_chain_id
