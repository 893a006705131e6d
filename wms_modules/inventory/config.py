"""
Inventory Configuration Schema.

Defines the structure and defaults for stock ledger settings.
"""

from dataclasses import dataclass
from typing import Self

from wms_kernel.logging_config import get_logger
from wms_modules.inventory.models import DEFAULT_INITIAL_REASON, REASON_MAX_LENGTH

logger = get_logger("modules.inventory.config")


@dataclass
class InventoryConfig:
    """
    Configuration schema for the inventory module.

    Override at instantiation:

        config = InventoryConfig(default_history_limit=20)
    """

    # Reason recorded on the INITIAL movement when the caller gives none
    default_initial_reason: str = DEFAULT_INITIAL_REASON

    # Movement history queries
    default_history_limit: int = 50
    max_history_limit: int = 500

    def __post_init__(self):
        if not self.default_initial_reason or not self.default_initial_reason.strip():
            raise ValueError("default_initial_reason cannot be blank")
        if len(self.default_initial_reason) > REASON_MAX_LENGTH:
            raise ValueError(
                f"default_initial_reason cannot exceed {REASON_MAX_LENGTH} characters"
            )
        if self.default_history_limit <= 0:
            raise ValueError("default_history_limit must be positive")
        if self.max_history_limit < self.default_history_limit:
            raise ValueError(
                "max_history_limit must be at least default_history_limit, "
                f"got {self.max_history_limit} < {self.default_history_limit}"
            )

        logger.info(
            "inventory_config_initialized",
            extra={
                "default_history_limit": self.default_history_limit,
                "max_history_limit": self.max_history_limit,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("inventory_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from dictionary (e.g., loaded from a YAML file)."""
        logger.info(
            "inventory_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
