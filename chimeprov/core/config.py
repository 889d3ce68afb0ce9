"""
ProvisionerConfig - Unified configuration for the provisioner.

Holds every tunable of a provisioning run in one place:
- Polling intervals and attempt caps for the three polling loops
- The delay inserted before phone number deletion
- Lambda deadline margin
- Logging options

Example:
    >>> from chimeprov.core.config import ProvisionerConfig, configure
    >>>
    >>> config = ProvisionerConfig(order_poll_interval=2.0, phone_delete_delay=0)
    >>> configure(config)

    # Or from the environment (CHIMEPROV_* variables, .env supported)
    >>> configure(ProvisionerConfig.from_env())
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from chimeprov.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PHYSICAL_RESOURCE_ID = "ChimeSDKProvider"

# Observed provider race: deleting a phone number right after its SIP rule
# fails with "bad service request" unless a short pause is inserted.
DEFAULT_PHONE_DELETE_DELAY = 5.0

DEFAULT_ORDER_POLL_INTERVAL = 5.0
DEFAULT_STACK_POLL_INTERVAL = 0.25


@dataclass
class ProvisionerConfig:
    """
    Unified configuration for a provisioning run.

    Attributes:
        order_poll_interval: Seconds between token-less phone order list calls
        order_poll_max_attempts: Attempt cap for the phone order loop
        order_page_size: MaxResults for list_phone_number_orders
        phone_id_poll_interval: Seconds between token-less phone number list calls
        phone_id_poll_max_attempts: Attempt cap for the phone ID loop
        phone_id_page_size: MaxResults for list_phone_numbers
        stack_poll_interval: Seconds between token-less describe_stacks calls
        stack_poll_max_attempts: Attempt cap for the stack discovery loop
        phone_delete_delay: Pause before deleting the phone number
        deadline_margin: Seconds kept in reserve before the Lambda deadline
        physical_resource_id: PhysicalResourceId reported on create
        chime_service_name: boto3 service name for the telephony API
        log_level: Level for the 'chimeprov' logger
        json_logs: Emit JSON structured logs
    """

    order_poll_interval: float = DEFAULT_ORDER_POLL_INTERVAL
    order_poll_max_attempts: int = 120
    order_page_size: int = 99

    phone_id_poll_interval: float = 1.0
    phone_id_poll_max_attempts: int = 120
    phone_id_page_size: int = 99

    stack_poll_interval: float = DEFAULT_STACK_POLL_INTERVAL
    stack_poll_max_attempts: int = 240

    phone_delete_delay: float = DEFAULT_PHONE_DELETE_DELAY
    deadline_margin: float = 10.0

    physical_resource_id: str = DEFAULT_PHYSICAL_RESOURCE_ID
    chime_service_name: str = "chime"

    log_level: str = "INFO"
    json_logs: bool = True

    def __post_init__(self) -> None:
        for name in (
            "order_poll_interval",
            "phone_id_poll_interval",
            "stack_poll_interval",
            "phone_delete_delay",
            "deadline_margin",
        ):
            if getattr(self, name) < 0:
                msg = f"{name} must be >= 0, got {getattr(self, name)}"
                raise ConfigurationError(msg)

        for name in (
            "order_poll_max_attempts",
            "phone_id_poll_max_attempts",
            "stack_poll_max_attempts",
            "order_page_size",
            "phone_id_page_size",
        ):
            if getattr(self, name) < 1:
                msg = f"{name} must be >= 1, got {getattr(self, name)}"
                raise ConfigurationError(msg)

        if self.log_level.upper() not in logging.getLevelNamesMapping():
            msg = f"Unknown log level: {self.log_level}"
            raise ConfigurationError(msg)
        self.log_level = self.log_level.upper()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_env(cls) -> ProvisionerConfig:
        """
        Build configuration from CHIMEPROV_* environment variables.

        Every field maps to CHIMEPROV_<FIELD_NAME_UPPERCASE>; unset variables
        keep the dataclass default.

        Example:
            CHIMEPROV_ORDER_POLL_INTERVAL=2
            CHIMEPROV_PHONE_DELETE_DELAY=0
            CHIMEPROV_LOG_LEVEL=DEBUG
        """
        from chimeprov.core.env import get_env

        env = get_env()
        defaults = cls()
        values: dict[str, Any] = {}

        for f in fields(cls):
            default = getattr(defaults, f.name)
            key = f.name.upper()
            if isinstance(default, bool):
                values[f.name] = env.get_bool(key, default)
            elif isinstance(default, int):
                values[f.name] = env.get_int(key, default)
            elif isinstance(default, float):
                values[f.name] = env.get_float(key, default)
            else:
                values[f.name] = env.get(key, default)

        return cls(**values)

    @classmethod
    def from_file(cls, file_path: str | Path, substitute_env: bool = True) -> ProvisionerConfig:
        """
        Load configuration from a YAML file.

        Top-level keys are field names. Supports ${VAR} substitution.

        Example:
            # chimeprov.yaml
            order_poll_interval: 5
            phone_delete_delay: ${CHIMEPROV_PHONE_DELETE_DELAY:-5}
        """
        import yaml

        from chimeprov.core.env import get_env

        path = Path(file_path)
        if not path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        with path.open() as f:
            data = yaml.safe_load(f)

        if not data:
            return cls()

        if substitute_env:
            data = get_env().substitute_dict(data)

        known = {f.name: f for f in fields(cls)}
        unknown = set(data) - set(known)
        if unknown:
            msg = f"Unknown configuration keys: {', '.join(sorted(unknown))}"
            raise ConfigurationError(msg)

        defaults = cls()
        values: dict[str, Any] = {}
        for name, raw in data.items():
            default = getattr(defaults, name)
            values[name] = _coerce(name, raw, type(default))

        return cls(**values)


def _coerce(name: str, raw: Any, target: type) -> Any:
    """Coerce a YAML value (possibly a substituted string) to the field type."""
    if isinstance(raw, target) and not (target is int and isinstance(raw, bool)):
        return raw
    try:
        if target is bool:
            return str(raw).lower() in ("true", "1", "yes", "on")
        return target(raw)
    except (TypeError, ValueError) as e:
        msg = f"Invalid value for {name}: {raw!r}"
        raise ConfigurationError(msg) from e


# Global configuration singleton
_global_config: ProvisionerConfig | None = None


def get_config() -> ProvisionerConfig:
    """Get the global provisioner configuration."""
    global _global_config
    if _global_config is None:
        _global_config = ProvisionerConfig()
    return _global_config


def configure(config: ProvisionerConfig) -> None:
    """Set the global provisioner configuration."""
    global _global_config
    _global_config = config
    logger.info(f"Provisioner configured: {config.to_dict()}")
