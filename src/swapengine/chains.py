"""Chain registry and classification helpers.

Supports 4 EVM chains grouped into families:
- Celo mainnet and Alfajores testnet (Mento broker, CUSD hub)
- Arbitrum One (LI.FI aggregated DEXes, Uniswap V3)
- Arc Testnet

Every function here is pure: no network access, no mutable state.
"""

from dataclasses import dataclass, field
from typing import Optional

from swapengine.config import get_settings


@dataclass
class ChainConfig:
    """Configuration for a blockchain."""

    # Required fields (no defaults) - must come first
    name: str
    chain_id: int
    family: str
    explorer_url: str

    # Optional fields (with defaults)
    is_testnet: bool = False
    broker_address: Optional[str] = None  # Mento broker, if deployed
    hub_token: Optional[str] = None  # Intermediate token for two-hop routes
    uniswap_router: Optional[str] = None  # Uniswap V3 SwapRouter
    uniswap_quoter: Optional[str] = None  # Uniswap V3 QuoterV2
    legacy_transactions: bool = False  # Send gasPrice (type 0) transactions
    tokens: dict[str, str] = field(default_factory=dict)

    @property
    def rpc_url(self) -> str:
        return get_settings().get_rpc_url(self.chain_id)


CELO_MAINNET_ID = 42220
ALFAJORES_ID = 44787
ARBITRUM_ONE_ID = 42161
ARC_TESTNET_ID = 5042002

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
NATIVE_TOKEN_ADDRESSES = {
    ZERO_ADDRESS,
    "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee",
}


# ======================
# Chain Configurations
# ======================

CHAINS: dict[int, ChainConfig] = {
    CELO_MAINNET_ID: ChainConfig(
        name="Celo Mainnet",
        chain_id=CELO_MAINNET_ID,
        family="celo",
        explorer_url="https://celo.blockscout.com",
        broker_address="0x777a8255ca72412f0d706dc03c9d1987306b4cad",
        hub_token="CUSD",
        legacy_transactions=True,
        tokens={
            "CELO": "0x471ece3750da237f93b8e339c536989b8978a438",
            "CUSD": "0x765DE816845861e75A25fCA122bb6898B8B1282a",
            "CEUR": "0xD8763CBa276a3738E6DE85b4b3bF5FDed6D6cA73",
            "CREAL": "0xe8537a3d056DA446677B9E9d6c5dB704EaAb4787",
            "CKES": "0x456a3D042C0DbD3db53D5489e98dFb038553B0d0",
            "CCOP": "0x8A567e2aE79CA692Bd748aB832081C45de4041eA",
            "PUSO": "0x105d4A9306D2E55a71d2Eb95B81553AE1dC20d7B",
            "CGHS": "0xfAeA5F3404bbA20D3cc2f8C4B0A888F55a3c7313",
            "CGBP": "0xCCF663b1fF11028f0b19058d0f7B674004a40746",
            "CZAR": "0x4c35853A3B4e647fD266f4de678dCc8fEC410BF6",
            "CCAD": "0xff4Ab19391af240c311c54200a492233052B6325",
            "CAUD": "0x7175504C455076F15c04A2F90a8e352281F492F9",
            "CXOF": "0x73F93dcc49cB8A239e2032663e9475dd5ef29A08",
            "CCHF": "0xb55a79F398E759E43C95b979163f30eC87Ee131D",
            "CJPY": "0xc45eCF20f3CD864B32D9794d6f76814aE8892e20",
            "CNGN": "0xE2702Bd97ee33c88c8f6f92DA3B733608aa76F71",
            "USDT": "0x48065fbbe25f71c9282ddf5e1cd6d6a887483d5e",
        },
    ),

    ALFAJORES_ID: ChainConfig(
        name="Celo Alfajores",
        chain_id=ALFAJORES_ID,
        family="celo",
        explorer_url="https://alfajores.celoscan.io",
        is_testnet=True,
        broker_address="0xD3Dff18E465bCa6241A244144765b4421Ac14D09",
        hub_token="CUSD",
        legacy_transactions=True,
        tokens={
            "CELO": "0xF194afDf50B03e69Bd7D057c1Aa9e10c9954E4C9",
            "CUSD": "0x874069fa1eb16d44d622f2e0ca25eea172369bc1",
            "CEUR": "0x10c892a6ec43a53e45d0b916b4b7d383b1b78c0f",
            "CREAL": "0xe4d517785d091d3c54818832db6094bcc2744545",
            "CXOF": "0xB0FA15e002516d0301884059c0aaC0F0C72b019D",
            "CKES": "0x1E0433C1769271ECcF4CFF9FDdD515eefE6CdF92",
            "CPESO": "0x5E0E3c9419C42a1B04e2525991FB1A2C467AB8bF",
            "CCOP": "0xe6A57340f0df6E020c1c0a80bC6E13048601f0d4",
            "CGHS": "0x295B66bE7714458Af45E6A6Ea142A5358A6cA375",
            "CGBP": "0x47f2Fb88105155a18c390641C8a73f1402B2BB12",
            "CZAR": "0x1e5b44015Ff90610b54000DAad31C89b3284df4d",
            "CCAD": "0x02EC9E0D2Fd73e89168C1709e542a48f58d7B133",
            "CAUD": "0x84CBD49F5aE07632B6B88094E81Cce8236125Fe0",
            "PUSO": "0x105d4A9306D2E55a71d2Eb95B81553AE1dC20d7B",
            "USDT": "0xd077A400968890Eacc75cdc901F0356c943e4fDb",
        },
    ),

    ARBITRUM_ONE_ID: ChainConfig(
        name="Arbitrum One",
        chain_id=ARBITRUM_ONE_ID,
        family="arbitrum",
        explorer_url="https://arbiscan.io",
        uniswap_router="0xE592427A0AEce92De3Edee1F18E0157C05861564",
        uniswap_quoter="0x61fFE014bA17989E743c5F6cB21bF9697530B21e",
        tokens={
            "USDC": "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
            "PAXG": "0xfeb4dfc8c4cf7ed305bb08065d08ec6ee6728429",
            "USDY": "0x96F6eF951840721AdBF41Ac996DdF11aCb0A6382",
        },
    ),

    ARC_TESTNET_ID: ChainConfig(
        name="Arc Testnet",
        chain_id=ARC_TESTNET_ID,
        family="arc",
        explorer_url="https://testnet.arcscan.app",
        is_testnet=True,
        tokens={
            "USDC": "0x3600000000000000000000000000000000000000",
            "EURC": "0x89B50855Aa3bE2F677cD6303Cec089B5F319D72a",
        },
    ),
}

# Token decimals (anything not listed uses 18)
TOKEN_DECIMALS = {
    "USDT": 6,
    "USDC": 6,
    "EURC": 6,
}

CONFIRMATIONS_MAINNET = 1
CONFIRMATIONS_TESTNET = 2


# ======================
# Classification
# ======================

def get_chain(chain_id: Optional[int]) -> Optional[ChainConfig]:
    """Get chain configuration by chain ID."""
    if chain_id is None:
        return None
    return CHAINS.get(chain_id)


def is_supported(chain_id: Optional[int]) -> bool:
    """Check if a chain is supported at all."""
    return get_chain(chain_id) is not None


def is_celo(chain_id: Optional[int]) -> bool:
    """Check if chain is Celo (mainnet or testnet)."""
    chain = get_chain(chain_id)
    return chain is not None and chain.family == "celo"


def is_arbitrum(chain_id: Optional[int]) -> bool:
    return chain_id == ARBITRUM_ONE_ID


def is_testnet(chain_id: Optional[int]) -> bool:
    chain = get_chain(chain_id)
    return chain is not None and chain.is_testnet


def is_same_family(from_chain_id: Optional[int], to_chain_id: Optional[int]) -> bool:
    """Check whether two supported chains belong to the same L1/L2 cluster."""
    from_chain = get_chain(from_chain_id)
    to_chain = get_chain(to_chain_id)
    if from_chain is None or to_chain is None:
        return False
    return from_chain.family == to_chain.family


def is_cross_chain(from_chain_id: Optional[int], to_chain_id: Optional[int]) -> bool:
    """Check if a swap needs a bridge.

    Only true when both chains are supported and belong to different
    families; an unsupported endpoint is never bridgeable.
    """
    if not is_supported(from_chain_id) or not is_supported(to_chain_id):
        return False
    return not is_same_family(from_chain_id, to_chain_id)


def get_chain_type(chain_id: Optional[int]) -> str:
    """Get chain family name ('unknown' for unsupported chains)."""
    chain = get_chain(chain_id)
    return chain.family if chain else "unknown"


def get_network_name(chain_id: Optional[int]) -> str:
    """Get network name for display."""
    chain = get_chain(chain_id)
    return chain.name if chain else "Unknown Network"


def get_supported_chain_ids() -> list[int]:
    return list(CHAINS.keys())


def get_all_chains() -> list[ChainConfig]:
    """Get all chain configurations."""
    return list(CHAINS.values())


# ======================
# Token / Contract Lookups
# ======================

def get_token_address(chain_id: int, symbol: str) -> Optional[str]:
    """Get token contract address by symbol on a chain."""
    chain = get_chain(chain_id)
    if not chain:
        return None
    return chain.tokens.get(symbol.upper())


def get_token_decimals(symbol: str) -> int:
    return TOKEN_DECIMALS.get(symbol.upper(), 18)


def get_broker_address(chain_id: int) -> Optional[str]:
    """Get the Mento broker address, or None when no broker is deployed."""
    chain = get_chain(chain_id)
    if not chain or not chain.broker_address or chain.broker_address == ZERO_ADDRESS:
        return None
    return chain.broker_address


def get_uniswap_v3_contracts(chain_id: int) -> Optional[tuple[str, str]]:
    """Get (router, quoter) for Uniswap V3, or None when not deployed."""
    chain = get_chain(chain_id)
    if not chain or not chain.uniswap_router or not chain.uniswap_quoter:
        return None
    return chain.uniswap_router, chain.uniswap_quoter


def get_confirmations(chain_id: int) -> int:
    """Get the number of confirmations to wait for on a chain."""
    return CONFIRMATIONS_TESTNET if is_testnet(chain_id) else CONFIRMATIONS_MAINNET


def is_native_token(address: str) -> bool:
    return address.lower() in NATIVE_TOKEN_ADDRESSES
