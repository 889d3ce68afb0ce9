"""
Environment variable management with .env file support.

Loads a .env file (when python-dotenv finds one) and exposes typed getters
for the CHIMEPROV_* variables read by ProvisionerConfig.from_env(), plus
${VAR} substitution for YAML configuration files.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

ENV_PREFIX = "CHIMEPROV_"


class EnvManager:
    """
    Manages environment variables for the provisioner.

    Example:
        >>> env = EnvManager()
        >>> env.get_float("ORDER_POLL_INTERVAL", 5.0)
        5.0
    """

    def __init__(
        self,
        project_root: Path | str | None = None,
        auto_load: bool = True,
        prefix: str = ENV_PREFIX,
    ):
        self.project_root = Path(project_root) if project_root else Path.cwd()
        self.prefix = prefix
        self._loaded = False

        if auto_load:
            self.load()

    def load(self, env_file: str | Path | None = None, override: bool = False) -> bool:
        """
        Load environment variables from a .env file.

        Returns:
            True if the file existed and was loaded
        """
        env_path = Path(env_file) if env_file else self.project_root / ".env"
        if not env_path.exists():
            return False

        load_dotenv(env_path, override=override)
        self._loaded = True
        return True

    def _key(self, key: str) -> str:
        if key.startswith(self.prefix):
            return key
        return f"{self.prefix}{key}"

    def get(self, key: str, default: str | None = None, required: bool = False) -> str | None:
        """
        Get a prefixed environment variable.

        Raises:
            ValueError: If required=True and the variable is not set
        """
        full_key = self._key(key)
        value = os.environ.get(full_key, default)

        if required and value is None:
            msg = f"Required environment variable not set: {full_key}"
            raise ValueError(msg)

        return value

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get environment variable as boolean."""
        value = (self.get(key) or "").lower()
        if value in ("true", "1", "yes", "on"):
            return True
        if value in ("false", "0", "no", "off"):
            return False
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        """Get environment variable as integer."""
        try:
            return int(self.get(key, str(default)))
        except (ValueError, TypeError):
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Get environment variable as float."""
        try:
            return float(self.get(key, str(default)))
        except (ValueError, TypeError):
            return default

    def substitute(self, text: str) -> str:
        """
        Substitute ${VAR}, ${VAR:-default} and ${VAR:?error} references.

        Unprefixed: substitution reads the variable names as written.
        """
        pattern = r"\$\{([^}:]+)(?::([?-])([^}]*))?\}"

        def replace(match):
            var_name, operator, operand = match.group(1), match.group(2), match.group(3)
            value = os.environ.get(var_name)

            if operator == "-":
                return value if value is not None else operand
            if operator == "?":
                if value is None:
                    raise ValueError(operand or f"Required variable not set: {var_name}")
                return value
            return value if value is not None else match.group(0)

        return re.sub(pattern, replace, text)

    def substitute_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        """Recursively substitute environment variables in dictionary values."""
        result: dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, str):
                result[key] = self.substitute(value)
            elif isinstance(value, dict):
                result[key] = self.substitute_dict(value)
            else:
                result[key] = value
        return result


_global_env: EnvManager | None = None


def get_env() -> EnvManager:
    """Get the global environment manager instance."""
    global _global_env
    if _global_env is None:
        _global_env = EnvManager()
    return _global_env
