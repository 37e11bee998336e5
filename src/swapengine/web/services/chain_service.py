"""Chain information service."""

from typing import Optional

from swapengine.chains import (
    ChainConfig,
    get_all_chains,
    get_broker_address,
    get_chain,
    get_token_decimals,
    get_uniswap_v3_contracts,
)
from swapengine.web.contracts.chains import ChainInfo, ChainListResponse, TokenInfo


class ChainService:
    """Read-only view of the chain registry."""

    @staticmethod
    def _to_info(chain: ChainConfig) -> ChainInfo:
        return ChainInfo(
            chain_id=chain.chain_id,
            name=chain.name,
            family=chain.family,
            explorer_url=chain.explorer_url,
            is_testnet=chain.is_testnet,
            has_broker=get_broker_address(chain.chain_id) is not None,
            has_uniswap_v3=get_uniswap_v3_contracts(chain.chain_id) is not None,
            tokens=[
                TokenInfo(symbol=symbol, address=address, decimals=get_token_decimals(symbol))
                for symbol, address in chain.tokens.items()
            ],
        )

    def get_supported_chains(self) -> ChainListResponse:
        return ChainListResponse(chains=[self._to_info(chain) for chain in get_all_chains()])

    def get_chain(self, chain_id: int) -> Optional[ChainInfo]:
        chain = get_chain(chain_id)
        return self._to_info(chain) if chain else None
