"""Shared configuration loader for the Witnet CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urlparse

import yaml

from .errors import ConfigurationError

DEFAULT_CONFIG_PATH = Path.home() / ".witnet-cli.yaml"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 21338
DEFAULT_CONNECT_TIMEOUT = 10.0


@dataclass
class NodeConfig:
    """Connection details for the node's JSON-RPC server."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    use_http: bool = False
    use_https: bool = False
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT

    @property
    def address(self) -> str:
        """Resolved address string consumed by :func:`witnet_cli.transport.connect`."""

        if self.use_https:
            return f"https://{self.host}:{self.port}"
        if self.use_http:
            return f"http://{self.host}:{self.port}"
        return f"{self.host}:{self.port}"


def _load_config_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigurationError(f"Config file not found: {path}")
        return {}

    try:
        loaded = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - delegated to PyYAML
        raise ConfigurationError(f"Invalid YAML in config file {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Expected {path} to contain a YAML object with a 'node' section")
    return loaded


def _coerce_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "y", "on"}:
            return True
        if normalized in {"0", "false", "no", "n", "off"}:
            return False
    return None


def _coerce_port(raw: Any, *, source: str) -> int | None:
    if raw is None:
        return None
    try:
        port = int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid port in {source}: {raw}") from exc
    if not 0 < port < 65536:
        raise ConfigurationError(f"Port out of range in {source}: {raw}")
    return port


def _coerce_timeout(raw: Any, *, source: str) -> float | None:
    if raw is None:
        return None
    try:
        timeout = float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid connect timeout in {source}: {raw}") from exc
    if timeout <= 0:
        raise ConfigurationError(f"Connect timeout must be positive in {source}: {raw}")
    return timeout


def _first_value(*values: Any, default: Any = None) -> Any:
    for value in values:
        if value is not None:
            return value
    return default


def parse_address(raw: str | None) -> tuple[str | None, int | None, str | None]:
    """Split ``host:port`` or ``http(s)://host:port`` into its parts.

    Returns ``(host, port, scheme)`` where ``scheme`` is ``None`` for plain TCP
    addresses.
    """

    if not raw:
        return None, None, None
    raw = raw.strip()
    if "://" in raw:
        parsed = urlparse(raw)
        scheme = parsed.scheme.lower()
        if scheme not in {"http", "https"} or not parsed.hostname:
            raise ConfigurationError(f"Invalid node endpoint URL: {raw}")
        try:
            port = parsed.port
        except ValueError as exc:
            raise ConfigurationError(f"Invalid port in node endpoint URL: {raw}") from exc
        return parsed.hostname, port, scheme

    host, sep, port_text = raw.rpartition(":")
    if not sep or not host:
        raise ConfigurationError(f"Node address must look like host:port, got {raw!r}")
    return host.strip("[]"), _coerce_port(port_text, source=f"address {raw!r}"), None


def load_node_config(
    *,
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> NodeConfig:
    """Load node connection settings from overrides, environment and optional YAML."""

    env_map = os.environ if env is None else env
    explicit_path = config_path is not None
    path = Path(config_path).expanduser() if explicit_path else DEFAULT_CONFIG_PATH

    file_config = _load_config_file(path, required=explicit_path)
    node_section = file_config.get("node", {})
    if node_section is None:
        node_section = {}
    if not isinstance(node_section, dict):
        raise ConfigurationError(f"Expected 'node' to be a mapping in {path}")

    override_map = dict(overrides or {})

    address_host, address_port, address_scheme = parse_address(
        _first_value(
            override_map.get("address"),
            env_map.get("WITNET_NODE_ADDRESS"),
            node_section.get("address"),
        )
    )

    resolved_host = _first_value(
        override_map.get("host"),
        address_host,
        env_map.get("WITNET_NODE_HOST"),
        node_section.get("host"),
        DEFAULT_HOST,
    )
    resolved_port = _first_value(
        _coerce_port(override_map.get("port"), source="overrides"),
        address_port,
        _coerce_port(env_map.get("WITNET_NODE_PORT"), source="environment"),
        _coerce_port(node_section.get("port"), source=f"{path} node.port"),
        DEFAULT_PORT,
    )
    resolved_use_https = _first_value(
        _coerce_bool(override_map.get("use_https")),
        address_scheme == "https" if address_scheme else None,
        _coerce_bool(env_map.get("WITNET_NODE_USE_HTTPS")),
        _coerce_bool(node_section.get("use_https")),
        False,
    )
    resolved_timeout = _first_value(
        _coerce_timeout(override_map.get("connect_timeout"), source="overrides"),
        _coerce_timeout(env_map.get("WITNET_NODE_TIMEOUT"), source="environment"),
        _coerce_timeout(node_section.get("connect_timeout"), source=f"{path} node.connect_timeout"),
        DEFAULT_CONNECT_TIMEOUT,
    )

    return NodeConfig(
        host=resolved_host,
        port=resolved_port,
        use_http=address_scheme == "http",
        use_https=bool(resolved_use_https),
        connect_timeout=resolved_timeout,
    )
