"""
Configuration loading and normalization for the FY arbitrage strategy.

Reads a YAML file, applies environment overrides (``.env`` supported), runs
schema validation and returns frozen runtime objects. Every failure is raised
as ``ConfigurationError`` so it surfaces once, at startup.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from .config_schema import (
    DEFAULT_MAX_BASE_AMOUNT,
    DEFAULT_MAX_FY_AMOUNT,
    StrategyConfigModel,
)
from .curve import DiscountCurve
from .exceptions import ConfigurationError, ValidationError
from .utils import is_valid_basis_points, is_valid_percentage

# Environment variable -> config key
ENV_OVERRIDES = {
    "ROUTER_ADDRESS": "router_address",
    "POOL_ADDRESSES": "pool_addresses",
    "EDGE_BPS": "edge_bps",
    "SLIPPAGE_BPS": "slippage_bps",
    "MAX_FY_AMOUNT": "max_fy_amount",
    "MAX_BASE_AMOUNT": "max_base_amount",
    "BID_PERCENTAGE": "bid_percentage",
    "RECIPIENT": "recipient",
}


@dataclass(frozen=True)
class StrategyConfig:
    """Immutable strategy configuration, fixed for the process lifetime."""

    router_id: str
    pool_ids: Tuple[str, ...]
    edge_bps: int = 10
    slippage_bps: int = 50
    max_fy_amount: int = DEFAULT_MAX_FY_AMOUNT
    max_base_amount: int = DEFAULT_MAX_BASE_AMOUNT
    bid_percentage: int = 80
    recipient: Optional[str] = None
    gas_cost_estimate: int = 0

    def __post_init__(self):
        object.__setattr__(self, "pool_ids", tuple(self.pool_ids))

        if not self.pool_ids:
            raise ConfigurationError("At least one pool must be configured")
        if not is_valid_basis_points(self.edge_bps):
            raise ConfigurationError(f"edge_bps out of range: {self.edge_bps}")
        if not is_valid_basis_points(self.slippage_bps):
            raise ConfigurationError(f"slippage_bps out of range: {self.slippage_bps}")
        if not is_valid_percentage(self.bid_percentage):
            raise ConfigurationError(
                f"bid_percentage must be within [0, 100]: {self.bid_percentage}",
                {"bid_percentage": self.bid_percentage},
            )
        if self.max_fy_amount <= 0 or self.max_base_amount <= 0:
            raise ConfigurationError("Position limits must be positive")
        if self.gas_cost_estimate < 0:
            raise ConfigurationError("gas_cost_estimate cannot be negative")


@dataclass(frozen=True)
class NetworkConfig:
    """Normalized chain connectivity configuration."""

    rpc_url: Optional[str] = None
    private_key_env: str = "PRIVATE_KEY"
    poll_interval_sec: float = 2.0
    request_timeout_sec: float = 20.0
    max_retries: int = 3


@dataclass(frozen=True)
class RuntimeConfig:
    """Everything the runner needs to wire a strategy."""

    strategy: StrategyConfig
    curve: DiscountCurve
    network: NetworkConfig = field(default_factory=NetworkConfig)


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load and parse YAML configuration file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if config_dict is None:
        raise ConfigurationError(f"Empty configuration file: {config_path}")
    if not isinstance(config_dict, dict):
        raise ConfigurationError("Config file must contain a YAML dictionary")

    return config_dict


def apply_env_overrides(
    config_dict: Dict[str, Any], environ: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """Overlay environment variables on top of file values."""
    environ = os.environ if environ is None else environ
    result = dict(config_dict)

    for env_key, config_key in ENV_OVERRIDES.items():
        value = environ.get(env_key)
        if value is None or value == "":
            continue
        if config_key == "pool_addresses":
            result[config_key] = [a.strip() for a in value.split(",") if a.strip()]
        else:
            result[config_key] = value

    return result


def build_runtime_config(
    config_dict: Dict[str, Any], environ: Optional[Mapping[str, str]] = None
) -> RuntimeConfig:
    """
    Validate a config mapping and normalize it into runtime objects.

    Raises:
        ConfigurationError: If validation fails
    """
    try:
        model = StrategyConfigModel(**config_dict)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e
    except TypeError as e:
        raise ConfigurationError(f"Malformed configuration: {e}") from e

    strategy = StrategyConfig(
        router_id=model.router_address,
        pool_ids=tuple(model.pool_addresses),
        edge_bps=model.edge_bps,
        slippage_bps=model.slippage_bps,
        max_fy_amount=model.max_fy_amount,
        max_base_amount=model.max_base_amount,
        bid_percentage=model.bid_percentage,
        recipient=model.recipient,
        gas_cost_estimate=model.gas_cost_estimate,
    )

    if model.curve is None:
        curve = DiscountCurve.default_usd()
    else:
        try:
            curve = DiscountCurve.from_dict(model.curve.model_dump())
        except ValidationError as e:
            raise ConfigurationError(f"Invalid curve: {e}") from e

    environ = os.environ if environ is None else environ
    net = model.network
    network = NetworkConfig(
        rpc_url=net.rpc_url or environ.get(net.rpc_url_env),
        private_key_env=net.private_key_env,
        poll_interval_sec=net.poll_interval_sec,
        request_timeout_sec=net.request_timeout_sec,
        max_retries=net.max_retries,
    )

    return RuntimeConfig(strategy=strategy, curve=curve, network=network)


def load_runtime_config(
    config_path: Optional[Union[str, Path]] = None, use_env: bool = True
) -> RuntimeConfig:
    """
    Load configuration from a YAML file and/or the environment.

    Args:
        config_path: YAML file; when None, configuration comes only from
            environment variables
        use_env: Load ``.env`` and apply environment overrides

    Returns:
        Validated RuntimeConfig

    Raises:
        ConfigurationError: If the configuration cannot be loaded or is invalid
    """
    config_dict: Dict[str, Any] = {}
    if config_path is not None:
        config_dict = load_yaml_config(config_path)

    if use_env:
        load_dotenv()
        config_dict = apply_env_overrides(config_dict)
        return build_runtime_config(config_dict)

    return build_runtime_config(config_dict, environ={})
