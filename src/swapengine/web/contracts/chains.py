"""Chain information contracts."""

from typing import Optional

from pydantic import BaseModel, Field


class TokenInfo(BaseModel):
    """A token known on a chain."""

    symbol: str = Field(..., description="Token symbol")
    address: str = Field(..., description="Contract address")
    decimals: int = Field(..., description="Token decimals")


class ChainInfo(BaseModel):
    """Information about a supported blockchain."""

    chain_id: int = Field(..., description="EVM chain ID")
    name: str = Field(..., description="Chain display name")
    family: str = Field(..., description="Chain family (celo, arbitrum, arc)")
    explorer_url: Optional[str] = Field(None, description="Block explorer URL")
    is_testnet: bool = Field(default=False, description="Whether this is a testnet")
    has_broker: bool = Field(default=False, description="Whether a Mento broker is deployed")
    has_uniswap_v3: bool = Field(default=False, description="Whether Uniswap V3 is deployed")
    tokens: list[TokenInfo] = Field(default_factory=list)


class ChainListResponse(BaseModel):
    """Response containing list of supported chains."""

    success: bool = True
    chains: list[ChainInfo] = Field(default_factory=list)
