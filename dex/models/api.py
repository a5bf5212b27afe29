"""Pydantic request/response models for the exchange HTTP API.

Amounts are uint256 decimal strings on the wire; field names are camelCase,
matching the contract ABI.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from dex.models.types import Address, Uint256

if TYPE_CHECKING:
    from dex.pair import Pair
    from dex.tokens import ERC20


class DeployTokenRequest(BaseModel):
    symbol: str = Field(min_length=1, max_length=32, description="Token ticker")


class MintRequest(BaseModel):
    to: Address
    amount: Uint256


class ApproveRequest(BaseModel):
    owner: Address
    spender: Address
    amount: Uint256


class CreatePairRequest(BaseModel):
    token_a: Address = Field(alias="tokenA")
    token_b: Address = Field(alias="tokenB")

    model_config = {"populate_by_name": True}


class AddLiquidityRequest(BaseModel):
    sender: Address = Field(description="Depositor; must have approved the pair")
    amount0: Uint256
    amount1: Uint256


class RemoveLiquidityRequest(BaseModel):
    sender: Address
    liquidity: Uint256 = Field(description="Shares to burn")


class SwapRequest(BaseModel):
    sender: Address = Field(description="Trader; must have approved the pair")
    amount_in0: Uint256 = Field(default="0", alias="amountIn0")
    amount_in1: Uint256 = Field(default="0", alias="amountIn1")

    model_config = {"populate_by_name": True}


class TokenResponse(BaseModel):
    address: Address
    symbol: str
    total_supply: Uint256 = Field(alias="totalSupply")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_token(cls, token: ERC20) -> TokenResponse:
        return cls(address=token.address, symbol=token.symbol, total_supply=token.total_supply)


class BalanceResponse(BaseModel):
    account: Address
    balance: Uint256


class FactoryResponse(BaseModel):
    address: Address
    owner: Address
    pair_count: int = Field(alias="pairCount")
    fee_bps: int = Field(alias="feeBps")

    model_config = {"populate_by_name": True}


class PairResponse(BaseModel):
    address: Address
    token0: Address
    token1: Address
    reserve0: Uint256
    reserve1: Uint256
    total_supply: Uint256 = Field(alias="totalSupply")
    fee_bps: int = Field(alias="feeBps")
    state: str

    model_config = {"populate_by_name": True}

    @classmethod
    def from_pair(cls, pair: Pair) -> PairResponse:
        reserve0, reserve1 = pair.get_reserves()
        return cls(
            address=pair.address,
            token0=pair.token0.address,
            token1=pair.token1.address,
            reserve0=reserve0,
            reserve1=reserve1,
            total_supply=pair.total_supply,
            fee_bps=pair.fee_bps,
            state=pair.state.value,
        )


class AddLiquidityResponse(BaseModel):
    liquidity: Uint256
    pair: PairResponse


class RemoveLiquidityResponse(BaseModel):
    amount0: Uint256
    amount1: Uint256
    pair: PairResponse


class SwapResponse(BaseModel):
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")
    direction: str
    pair: PairResponse

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    error: str = Field(description="Error kind, e.g. insufficient_liquidity")
    detail: str
