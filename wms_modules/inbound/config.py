"""
Inbound Configuration Schema.

Defaults for purchase order handling and the read-model cache.
"""

from dataclasses import dataclass
from typing import Self

from wms_kernel.logging_config import get_logger

logger = get_logger("modules.inbound.config")


@dataclass
class InboundConfig:
    """
    Configuration schema for the inbound module.

    Override at instantiation:

        config = InboundConfig(default_currency="EUR", list_cache_ttl_seconds=60)
    """

    # Currency used when a line's unit cost is given as a bare amount
    default_currency: str = "USD"

    # Read-model cache
    list_cache_ttl_seconds: int = 300
    detail_cache_ttl_seconds: int = 600

    def __post_init__(self):
        if (
            not isinstance(self.default_currency, str)
            or len(self.default_currency) != 3
            or not self.default_currency.isalpha()
        ):
            raise ValueError(
                f"default_currency must be a 3-letter code, got {self.default_currency!r}"
            )
        self.default_currency = self.default_currency.upper()
        if self.list_cache_ttl_seconds <= 0:
            raise ValueError("list_cache_ttl_seconds must be positive")
        if self.detail_cache_ttl_seconds <= 0:
            raise ValueError("detail_cache_ttl_seconds must be positive")

        logger.info(
            "inbound_config_initialized",
            extra={
                "default_currency": self.default_currency,
                "list_cache_ttl_seconds": self.list_cache_ttl_seconds,
                "detail_cache_ttl_seconds": self.detail_cache_ttl_seconds,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("inbound_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from dictionary (e.g., loaded from a YAML file)."""
        logger.info(
            "inbound_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
