"""Chain information API endpoints."""

from fastapi import APIRouter, HTTPException

from swapengine.web.contracts.chains import ChainInfo, ChainListResponse
from swapengine.web.services.chain_service import ChainService

router = APIRouter(prefix="/chains", tags=["chains"])

# Service instance
_chain_service = ChainService()


@router.get("/", response_model=ChainListResponse)
async def get_chains() -> ChainListResponse:
    """Get list of supported blockchains.

    Returns chain IDs, families, explorers and known tokens.
    """
    return _chain_service.get_supported_chains()


@router.get("/{chain_id}", response_model=ChainInfo)
async def get_chain(chain_id: int) -> ChainInfo:
    """Get information about a specific chain."""
    chain = _chain_service.get_chain(chain_id)
    if not chain:
        raise HTTPException(status_code=404, detail=f"Chain not found: {chain_id}")
    return chain
