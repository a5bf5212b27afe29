"""Pydantic models and shared types for the exchange API."""

from dex.models.api import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    ApproveRequest,
    BalanceResponse,
    CreatePairRequest,
    DeployTokenRequest,
    ErrorResponse,
    FactoryResponse,
    MintRequest,
    PairResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    SwapRequest,
    SwapResponse,
    TokenResponse,
)
from dex.models.types import Address, Uint256, normalize_address, sort_tokens

__all__ = [
    # Types
    "Address",
    "Uint256",
    "normalize_address",
    "sort_tokens",
    # Requests
    "DeployTokenRequest",
    "MintRequest",
    "ApproveRequest",
    "CreatePairRequest",
    "AddLiquidityRequest",
    "RemoveLiquidityRequest",
    "SwapRequest",
    # Responses
    "TokenResponse",
    "BalanceResponse",
    "FactoryResponse",
    "PairResponse",
    "AddLiquidityResponse",
    "RemoveLiquidityResponse",
    "SwapResponse",
    "ErrorResponse",
]
