"""
Configuration schema validation using Pydantic
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from web3 import Web3

DEFAULT_MAX_FY_AMOUNT = 100_000 * 10**18
DEFAULT_MAX_BASE_AMOUNT = 50_000 * 10**18


class CurveKnotModel(BaseModel):
    """A single curve knot"""

    t: float = Field(ge=0, description="Time to maturity in years")
    rate: float = Field(ge=-1, le=1, description="Simple annualized rate")


class CurveConfigModel(BaseModel):
    """Reference discount curve configuration"""

    day_count: Literal["ACT/360", "ACT/365"] = "ACT/360"
    knots: List[CurveKnotModel] = Field(default_factory=list)

    @field_validator("knots")
    @classmethod
    def validate_sorted(cls, v):
        for prev, curr in zip(v, v[1:]):
            if curr.t < prev.t:
                raise ValueError(
                    f"Curve knots must be sorted by time: {prev.t} > {curr.t}"
                )
        return v

    model_config = {"extra": "forbid"}


class NetworkConfigModel(BaseModel):
    """Chain connectivity configuration"""

    rpc_url: Optional[str] = None
    rpc_url_env: str = "RPC_URL"
    private_key_env: str = "PRIVATE_KEY"
    poll_interval_sec: float = Field(ge=0.1, le=600, default=2.0)
    request_timeout_sec: float = Field(ge=1, le=300, default=20.0)
    max_retries: int = Field(ge=1, le=10, default=3)

    model_config = {"extra": "forbid"}


class StrategyConfigModel(BaseModel):
    """Complete FY arbitrage strategy configuration"""

    router_address: str = Field(description="Arbitrage router contract")
    pool_addresses: List[str] = Field(min_length=1, description="Pools to monitor")

    edge_bps: int = Field(ge=0, le=10000, default=10)
    slippage_bps: int = Field(ge=0, le=10000, default=50)
    max_fy_amount: int = Field(gt=0, default=DEFAULT_MAX_FY_AMOUNT)
    max_base_amount: int = Field(gt=0, default=DEFAULT_MAX_BASE_AMOUNT)
    bid_percentage: int = Field(ge=0, le=100, default=80)

    recipient: Optional[str] = None
    gas_cost_estimate: int = Field(ge=0, default=0)

    curve: Optional[CurveConfigModel] = None
    network: NetworkConfigModel = Field(default_factory=NetworkConfigModel)

    @field_validator("router_address", "recipient")
    @classmethod
    def validate_address(cls, v):
        if v is None:
            return v
        if not Web3.is_address(v):
            raise ValueError(f"Invalid address: {v}")
        return Web3.to_checksum_address(v)

    @field_validator("pool_addresses")
    @classmethod
    def validate_pool_addresses(cls, v):
        checksummed = []
        for addr in v:
            if not Web3.is_address(addr):
                raise ValueError(f"Invalid pool address: {addr}")
            checksummed.append(Web3.to_checksum_address(addr))
        return checksummed

    @model_validator(mode="after")
    def validate_unique_pools(self):
        if len(set(self.pool_addresses)) != len(self.pool_addresses):
            raise ValueError("pool_addresses contains duplicates")
        return self

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
    }
