"""Dashboard configuration loaded from YAML.

Every key is optional; a missing file section falls back to the defaults
below.  ``BRM_DASHBOARD_CONFIG`` names the file used when the CLI gets no
``--config``.

    store:
      base_dir: .brm-store
    routing:
      pending_approval: /pending-approval
      destinations:
        mentor_admin: /mentor/home
        mentor: /mentor/home
        client: /client
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_ENV_VAR = "BRM_DASHBOARD_CONFIG"

DEFAULT_PENDING_APPROVAL_ROUTE = "/pending-approval"
DEFAULT_ROLE_DESTINATIONS: Dict[str, str] = {
    "mentor_admin": "/mentor/home",
    "mentor": "/mentor/home",
    "client": "/client",
}


class ConfigError(ValueError):
    """The configuration file is unreadable or malformed."""


@dataclass(frozen=True)
class RoutingConfig:
    pending_approval: str = DEFAULT_PENDING_APPROVAL_ROUTE
    destinations: Dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_ROLE_DESTINATIONS)
    )


@dataclass(frozen=True)
class StoreConfig:
    base_dir: str = ".brm-store"


@dataclass(frozen=True)
class DashboardConfig:
    store: StoreConfig = field(default_factory=StoreConfig)
    routing: RoutingConfig = field(default_factory=RoutingConfig)


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key, {}) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{key}' must be a mapping")
    return value


def load_config(path: Optional[str | Path] = None) -> DashboardConfig:
    """Load configuration from *path*, ``$BRM_DASHBOARD_CONFIG``, or defaults.

    Raises:
        ConfigError: the file is missing, not YAML, or has malformed sections.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return DashboardConfig()

    p = Path(path)
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {p}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {p}: {exc}") from exc

    if raw is None:
        return DashboardConfig()
    if not isinstance(raw, dict):
        raise ConfigError("Config must be a YAML mapping at the root")

    store_raw = _section(raw, "store")
    routing_raw = _section(raw, "routing")

    destinations = dict(DEFAULT_ROLE_DESTINATIONS)
    overrides = routing_raw.get("destinations", {}) or {}
    if not isinstance(overrides, dict):
        raise ConfigError("routing.destinations must be a mapping of role to route")
    for role, route in overrides.items():
        if role not in DEFAULT_ROLE_DESTINATIONS:
            raise ConfigError(f"Unknown role in routing.destinations: {role!r}")
        destinations[role] = str(route)

    return DashboardConfig(
        store=StoreConfig(base_dir=str(store_raw.get("base_dir", StoreConfig.base_dir))),
        routing=RoutingConfig(
            pending_approval=str(
                routing_raw.get("pending_approval", DEFAULT_PENDING_APPROVAL_ROUTE)
            ),
            destinations=destinations,
        ),
    )
