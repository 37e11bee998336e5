"""Application configuration using pydantic-settings.

Holds RPC endpoints, LI.FI credentials, transaction tuning and the static
strategy ranking tables used by the swap orchestrator.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")

    # ======================
    # Chain RPC Endpoints
    # ======================
    celo_rpc_url: str = Field(default="https://forno.celo.org", description="Celo RPC URL")
    alfajores_rpc_url: str = Field(
        default="https://alfajores-forno.celo-testnet.org", description="Celo Alfajores RPC URL"
    )
    arbitrum_rpc_url: str = Field(
        default="https://arb1.arbitrum.io/rpc", description="Arbitrum One RPC URL"
    )
    arc_rpc_url: str = Field(
        default="https://rpc.testnet.arc.network", description="Arc Testnet RPC URL"
    )

    # ======================
    # LI.FI Aggregator
    # ======================
    lifi_api_url: str = Field(default="https://li.quest/v1", description="LI.FI API base URL")
    lifi_api_key: str = Field(default="", description="LI.FI API key (optional, raises rate limits)")
    lifi_integrator: str = Field(default="swapengine", description="LI.FI integrator tag")
    lifi_timeout: float = Field(default=30.0, description="LI.FI HTTP timeout in seconds")

    # ======================
    # Transactions
    # ======================
    default_slippage_bps: int = Field(
        default=50, ge=0, le=10000, description="Default slippage tolerance (50 bps = 0.5%)"
    )
    confirmation_timeout: float = Field(
        default=120.0, description="Maximum seconds to wait for a transaction confirmation"
    )
    poll_interval: float = Field(default=2.0, description="Seconds between receipt polls")
    approval_gas_limit: int = Field(default=300_000, description="Gas limit for ERC-20 approvals")
    swap_gas_limit: int = Field(default=800_000, description="Gas limit for broker swaps")
    uniswap_gas_limit: int = Field(default=300_000, description="Gas limit for Uniswap V3 swaps")
    swap_deadline_seconds: int = Field(
        default=1200, description="Router deadline for Uniswap V3 swaps, from submission"
    )

    # ======================
    # Orchestration
    # ======================
    enable_performance_tracking: bool = Field(
        default=True, description="Blend rolling strategy performance into ranking"
    )
    bridge_wait_for_destination: bool = Field(
        default=False, description="Poll the bridge status until the destination leg settles"
    )
    bridge_status_timeout: float = Field(
        default=900.0, description="Maximum seconds to wait for bridge settlement"
    )

    # ======================
    # Signing (server-side only)
    # ======================
    signer_private_key: Optional[str] = Field(
        default=None, description="Hex private key for the local signer"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def get_rpc_url(self, chain_id: int) -> str:
        """Get RPC URL for a chain ID."""
        rpc_map = {
            42220: self.celo_rpc_url,
            44787: self.alfajores_rpc_url,
            42161: self.arbitrum_rpc_url,
            5042002: self.arc_rpc_url,
        }
        return rpc_map.get(chain_id, "")

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "chains": {
                "celo": {"rpc": self.celo_rpc_url},
                "alfajores": {"rpc": self.alfajores_rpc_url},
                "arbitrum": {"rpc": self.arbitrum_rpc_url},
                "arc": {"rpc": self.arc_rpc_url},
            },
            "lifi": {
                "api_url": self.lifi_api_url,
                "api_key": "***" if self.lifi_api_key else "(not set)",
                "integrator": self.lifi_integrator,
            },
            "transactions": {
                "default_slippage_bps": self.default_slippage_bps,
                "confirmation_timeout": self.confirmation_timeout,
                "poll_interval": self.poll_interval,
            },
            "signer": "***" if self.signer_private_key else "(not set)",
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# ======================
# Strategy Ranking Tables
# ======================

# Base affinity of each strategy per source chain
STRATEGY_SCORES: dict[int, dict[str, int]] = {
    42220: {"MentoBroker": 100, "LiFiSwap": 10},
    44787: {"MentoBroker": 100},
    42161: {"UniswapV3": 80, "LiFiSwap": 60},
    5042002: {},
}

# Extra affinity when either side of the swap is one of these tokens
TOKEN_PREFERENCES: dict[str, dict[str, int]] = {
    "PAXG": {"LiFiSwap": 25},
    "USDC": {"LiFiSwap": 12, "UniswapV3": 12},
    "USDY": {"UniswapV3": 100, "LiFiSwap": 90},
}

CROSS_CHAIN_BRIDGE_BONUS = 90
CROSS_CHAIN_OTHER_BONUS = 10
SUCCESS_RATE_WEIGHT = 30
LATENCY_CEILING_SECONDS = 100
LATENCY_WEIGHT = 0.2
