"""Configuration management for the escrow client."""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml
from dotenv import load_dotenv
from solders.pubkey import Pubkey

_MAINNET_CLUSTER = "mainnet-beta"


class ConfigError(Exception):
    """Raise when configuration loading or validation fails."""


@dataclass(frozen=True)
class EscrowSettings:
    """Immutable connection and program settings shared by every component.

    Built once at process start and passed to each component at
    construction, so nothing reads global state after start-up.

    Args:
        rpc_url: Solana JSON-RPC endpoint.
        cluster: Cluster name used in explorer links (``devnet``, ``mainnet-beta``...).
        commitment: Commitment level for reads and confirmation.
        program_id: Address of the escrow program.
        explorer_url: Base URL of the block explorer.
        timeout: HTTP request timeout in seconds.
        poll_interval: Seconds between signature status polls.
        max_confirm_attempts: Status polls before giving up on confirmation.

    """

    rpc_url: str
    cluster: str
    commitment: str
    program_id: Pubkey
    explorer_url: str = "https://explorer.solana.com"
    timeout: float = 30.0
    poll_interval: float = 1.0
    max_confirm_attempts: int = 60

    def explorer_link(self, signature: str) -> str:
        """Return the explorer URL for a transaction signature."""
        url = f"{self.explorer_url.rstrip('/')}/tx/{signature}"
        if self.cluster == _MAINNET_CLUSTER:
            return url
        return f"{url}?cluster={self.cluster}"


class ConfigLoader:
    """Load and manage configuration from YAML files with environment variable substitution."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize the config loader.

        Load environment variables from a ``.env`` file (if present) and
        then read YAML configuration from the given directory.

        Args:
            config_dir: Directory containing config files. Defaults to src/swap_escrow/config.

        """
        load_dotenv()
        if config_dir is None:
            config_dir = Path(__file__).parent.parent / "config"
        self.config_dir = Path(config_dir)
        self._config: dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML files."""
        settings_file = self.config_dir / "settings.yaml"
        if settings_file.exists():
            with settings_file.open() as f:
                self._config = yaml.safe_load(f) or {}

        # Local overrides are optional and never committed
        local_settings = self.config_dir / "settings.local.yaml"
        if local_settings.exists():
            with local_settings.open() as f:
                local_config = cast("dict[str, Any]", yaml.safe_load(f) or {})
                self._deep_merge(self._config, local_config)

        self._config = self._substitute_env_vars(self._config)

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> None:
        """Deep merge override dict into base dict.

        Args:
            base: Base dictionary to merge into (modified in place).
            override: Dictionary with values to override.

        """
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], cast("dict[str, Any]", value))
            else:
                base[key] = value

    def _substitute_env_vars(self, config: Any) -> Any:
        """Recursively substitute environment variables in config.

        Supports format: ${VAR_NAME:default_value} or ${VAR_NAME}

        Args:
            config: Configuration value (dict, list, or str).

        Returns:
            Configuration with environment variables substituted.

        Raises:
            ConfigError: When a required variable is unset or a reference
                is embedded in a larger string.

        """
        if isinstance(config, dict):
            return {
                k: self._substitute_env_vars(v)
                for k, v in config.items()  # pyright: ignore[reportUnknownVariableType]
            }
        if isinstance(config, list):
            return [
                self._substitute_env_vars(item)
                for item in config  # pyright: ignore[reportUnknownVariableType]
            ]
        if isinstance(config, str) and config.startswith("${") and config.endswith("}"):
            var_expr = config[2:-1]
            if ":" in var_expr:
                var_name, default = var_expr.split(":", 1)
            else:
                var_name, default = var_expr, None

            value = os.getenv(var_name, default)
            if value is None:
                msg = f"Required environment variable ${{{var_name}}} is not set and has no default"
                raise ConfigError(msg)
            return value

        if isinstance(config, str) and re.search(r"\$\{[^}]+\}", config):
            msg = f"Unresolved environment variable reference in: {config}"
            raise ConfigError(msg)

        return config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-notation key.

        Args:
            key: Configuration key in dot notation (e.g., 'solana.rpc_url').
            default: Default value if key not found.

        Returns:
            Configuration value.

        """
        keys = key.split(".")
        current: Any = self._config
        for k in keys:
            if isinstance(current, dict):
                current = cast("dict[str, Any]", current).get(k)
                if current is None:
                    return default
            else:
                return default
        return current  # pyright: ignore[reportReturnType]

    def get_escrow_settings(self, *, rpc_url: str | None = None) -> EscrowSettings:
        """Build the immutable settings object used by every component.

        Args:
            rpc_url: Optional endpoint overriding ``solana.rpc_url``.

        Returns:
            Settings with typed values.

        Raises:
            ConfigError: When a required value is missing or malformed.

        """
        endpoint = rpc_url or self.get("solana.rpc_url")
        if not endpoint:
            msg = "solana.rpc_url is not configured"
            raise ConfigError(msg)

        raw_program_id = self.get("escrow.program_id")
        if not raw_program_id:
            msg = "escrow.program_id is not configured"
            raise ConfigError(msg)
        try:
            program_id = Pubkey.from_string(str(raw_program_id))
        except ValueError as exc:
            msg = f"escrow.program_id is not a valid address: {raw_program_id}"
            raise ConfigError(msg) from exc

        try:
            return EscrowSettings(
                rpc_url=str(endpoint),
                cluster=str(self.get("solana.cluster", "devnet")),
                commitment=str(self.get("solana.commitment", "confirmed")),
                program_id=program_id,
                explorer_url=str(self.get("escrow.explorer_url", "https://explorer.solana.com")),
                timeout=float(self.get("solana.timeout", 30.0)),
                poll_interval=float(self.get("confirmation.poll_interval", 1.0)),
                max_confirm_attempts=int(self.get("confirmation.max_attempts", 60)),
            )
        except (TypeError, ValueError) as exc:
            msg = f"Invalid escrow configuration: {exc}"
            raise ConfigError(msg) from exc


_config: ConfigLoader | None = None


def get_config() -> ConfigLoader:
    """Return the global ``ConfigLoader`` singleton, creating it on first use.

    Lazy initialisation avoids side effects (file I/O, ``load_dotenv``)
    at import time and makes testing easier.

    Returns:
        The shared ``ConfigLoader`` instance.

    """
    global _config  # noqa: PLW0603
    if _config is None:
        _config = ConfigLoader()
    return _config
