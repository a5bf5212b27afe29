"""Configuration for pools and the API service."""

import os
from dataclasses import dataclass

from dex.constants import DEFAULT_FEE_BPS, FEE_DENOMINATOR


def _env_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class DexConfig:
    """Centralized configuration for the exchange.

    Attributes:
        fee_bps: Trading fee charged on swap input, in basis points
            (default: 30, i.e. 0.3%)
        host: Host the API server binds to
        port: Port the API server binds to
        debug: Enable debug/reload mode for the API server
        log_level: Minimum structlog level name (e.g. "info", "debug")
    """

    fee_bps: int = DEFAULT_FEE_BPS
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "info"

    def __post_init__(self) -> None:
        if not 0 <= self.fee_bps < FEE_DENOMINATOR:
            raise ValueError(f"fee_bps must be in [0, {FEE_DENOMINATOR}), got {self.fee_bps}")

    @property
    def fee_multiplier(self) -> int:
        """Share of the swap input that is priced (10000 - fee_bps)."""
        return FEE_DENOMINATOR - self.fee_bps

    @classmethod
    def from_env(cls) -> "DexConfig":
        """Build a configuration from environment variables.

        - DEX_FEE_BPS: Trading fee in basis points (default: 30)
        - DEX_HOST: Host to bind to (default: 0.0.0.0)
        - DEX_PORT: Port to bind to (default: 8000)
        - DEX_DEBUG: Enable debug/reload mode (default: false)
        - DEX_LOG_LEVEL: Log level (default: info)
        """
        return cls(
            fee_bps=int(os.environ.get("DEX_FEE_BPS", str(DEFAULT_FEE_BPS))),
            host=os.environ.get("DEX_HOST", "0.0.0.0"),
            port=int(os.environ.get("DEX_PORT", "8000")),
            debug=_env_bool(os.environ.get("DEX_DEBUG", "false")),
            log_level=os.environ.get("DEX_LOG_LEVEL", "info").lower(),
        )


# Default configuration instance
DEFAULT_CONFIG = DexConfig()
