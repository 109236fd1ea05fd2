"""Pydantic configuration models for wttp-handler."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..addresses import format_address

# Selector aliases understood by every configuration
DEFAULT_ALIASES: dict[str, str] = {
    "leth": "localhost",
    "local": "localhost",
    "31337": "localhost",
    "seth": "sepolia",
    "11155111": "sepolia",
    "eth": "mainnet",
    "1": "mainnet",
}

DEFAULT_GATEWAY = "0x36C02dA8a0983159322a80FFE9F24b1acfF8B570"


def _expand_env_var(value: str) -> str:
    """Expand environment variable references in a string.

    Supports $VAR and ${VAR} syntax. Returns original value if
    the env var is not set.
    """
    import os
    import re

    # Match $VAR or ${VAR}
    pattern = r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)"

    def replace(match: re.Match) -> str:
        var_name = match.group(1) or match.group(2)
        return os.environ.get(var_name, match.group(0))

    return re.sub(pattern, replace, value)


class NetworkConfig(BaseModel):
    """Connection parameters for one network hosting WTTP sites.

    RPC endpoints may reference environment variables (``$VAR`` or
    ``${VAR}``) so that API keys stay out of config files.
    """

    name: str = Field("", description="Canonical network name (filled from the networks table key)")
    rpc_endpoints: list[str] = Field(..., min_length=1, description="JSON-RPC endpoint URLs, in preference order")
    chain_id: int = Field(..., ge=1, description="Numeric chain identifier")
    gateway_address: str = Field(..., description="Address of the WTTP gateway contract on this network")

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("rpc_endpoints")
    @classmethod
    def _expand_rpc_endpoints(cls, value: list[str]) -> list[str]:
        return [_expand_env_var(endpoint) for endpoint in value]

    @field_validator("gateway_address")
    @classmethod
    def _checksum_gateway(cls, value: str) -> str:
        return format_address(value)


class WttpConfig(BaseModel):
    """
    Root configuration model for wttp-handler.

    Built once and shared read-only by every fetch issued through a handler.

    Example:
        config = WttpConfig(
            networks={
                "sepolia": NetworkConfig(
                    rpc_endpoints=["https://rpc.sepolia.org"],
                    chain_id=11155111,
                    gateway_address="0x...",
                ),
            },
            max_redirects=10,
        )

    YAML format:
        networks:
          sepolia:
            rpc_endpoints: [https://rpc.sepolia.org]
            chain_id: 11155111
            gateway_address: "0x..."
        max_redirects: 10
    """

    networks: dict[str, NetworkConfig] = Field(
        ...,
        description="Networks by canonical name; the first entry is the default network",
    )
    aliases: dict[str, str] = Field(
        default_factory=dict,
        description="Extra network selector aliases, merged over the built-in table",
    )
    max_redirects: int = Field(20, ge=0, description="Maximum redirect hops per fetch")
    timeout: Optional[float] = Field(
        None,
        gt=0,
        description="Deadline in seconds for a whole fetch, redirects included (None = no deadline)",
    )
    strict_checksum: bool = Field(
        True,
        description="Reject mixed-case host addresses whose checksum does not verify",
    )
    validate_endpoints: bool = Field(
        True,
        description="Probe host and gateway for protocol conformance before each fetch",
    )
    error_responses: bool = Field(
        False,
        description="Return HTTP-shaped error responses instead of raising, where a status applies",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("networks", mode="before")
    @classmethod
    def _name_networks(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return value
        if not value:
            raise ValueError("At least one network must be configured")

        named: dict[str, Any] = {}
        for key, network in value.items():
            if isinstance(network, NetworkConfig):
                named[key] = network if network.name == key else network.model_copy(update={"name": key})
            elif isinstance(network, Mapping):
                named[key] = {**network, "name": key}
            else:
                named[key] = network
        return named

    @field_validator("aliases")
    @classmethod
    def _lowercase_aliases(cls, value: dict[str, str]) -> dict[str, str]:
        return {alias.lower(): name for alias, name in value.items()}

    @property
    def default_network(self) -> NetworkConfig:
        """The network used when a URL carries no selector."""
        return next(iter(self.networks.values()))

    def network_alias(self, selector: str) -> str:
        """Map a network selector to a canonical network name (unknown selectors pass through)."""
        key = selector.strip().lower()
        return self.aliases.get(key) or DEFAULT_ALIASES.get(key) or key

    def get_network(self, selector: Optional[str] = None) -> Optional[NetworkConfig]:
        """
        Look up a network by name, alias, or numeric chain id.

        Args:
            selector: Network selector from a URL; None or empty for the default

        Returns:
            The matching NetworkConfig, or None if nothing matches
        """
        if not selector:
            return self.default_network

        name = self.network_alias(selector)
        if name in self.networks:
            return self.networks[name]

        if name.isdigit():
            chain_id = int(name)
            for network in self.networks.values():
                if network.chain_id == chain_id:
                    return network
        return None

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        data = self.model_dump(mode="json", exclude_none=True)
        for network in data["networks"].values():
            network.pop("name", None)
        return yaml.dump(data, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> WttpConfig:
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str)
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> WttpConfig:
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text())


def default_config() -> WttpConfig:
    """Configuration for a local development chain."""
    return WttpConfig(
        networks={
            "localhost": NetworkConfig(
                rpc_endpoints=["http://localhost:8545"],
                chain_id=31337,
                gateway_address=DEFAULT_GATEWAY,
            ),
        },
    )
