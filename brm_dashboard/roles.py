"""
roles.py — Route an authenticated user to their workspace.

Resolution order:
  1. ``app_metadata.role`` on the auth user
  2. ``user_metadata.role`` on the auth user
  3. ``profiles.role`` for the user's id, read from the data store

Anything that does not normalise to a supported role sends the user to the
pending-approval route.  Any failure during step 3 is logged and treated as
"no role"; it never propagates to the caller.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .config import DEFAULT_PENDING_APPROVAL_ROUTE, DEFAULT_ROLE_DESTINATIONS, RoutingConfig
from .models import RoleResolution, Session
from .store import DataStore, DataStoreError, maybe_single

logger = logging.getLogger(__name__)

PENDING_APPROVAL_ROUTE = DEFAULT_PENDING_APPROVAL_ROUTE
SUPPORTED_ROLES = frozenset(DEFAULT_ROLE_DESTINATIONS)


def normalize_role(role: Any) -> Optional[str]:
    if not isinstance(role, str):
        return None
    normalized = role.strip().lower()
    if normalized in SUPPORTED_ROLES:
        return normalized
    return None


def resolve_destination_for_role(
    role: Optional[str],
    routing: Optional[RoutingConfig] = None,
) -> RoleResolution:
    routing = routing or RoutingConfig()
    if not role:
        return RoleResolution(destination=routing.pending_approval, role=None)

    destination = routing.destinations.get(role)
    if not destination:
        return RoleResolution(destination=routing.pending_approval, role=None)

    logger.info('Redirecting role "%s" to "%s"', role, destination)
    return RoleResolution(destination=destination, role=role)


def _metadata_role(metadata: Optional[Dict[str, Any]]) -> Optional[str]:
    return normalize_role((metadata or {}).get("role"))


def resolve_role_redirect(
    store: DataStore,
    session: Session,
    routing: Optional[RoutingConfig] = None,
) -> RoleResolution:
    """Resolve where *session*'s user should land."""
    routing = routing or RoutingConfig()
    user = session.user

    metadata_role = _metadata_role(user.app_metadata) or _metadata_role(user.user_metadata)
    if metadata_role:
        return resolve_destination_for_role(metadata_role, routing)

    try:
        profile = maybe_single(store, "profiles", {"id": user.id})
    except DataStoreError as exc:
        logger.error("Failed to fetch role from profiles table: %s", exc)
        profile = None
    except Exception:
        logger.exception("Unexpected error while resolving role redirect")
        profile = None

    raw_role = (profile or {}).get("role")
    profile_role = normalize_role(raw_role)
    if profile_role:
        return resolve_destination_for_role(profile_role, routing)

    if raw_role:
        logger.warning(
            'Received unexpected role value "%s" for user %s. '
            "Redirecting to pending approval.",
            raw_role, user.id,
        )

    logger.info(
        "No role found for user %s. Redirecting to pending approval "
        "until access is confirmed.",
        user.id,
    )
    return RoleResolution(destination=routing.pending_approval, role=None)


def handle_role_redirect(
    store: Optional[DataStore],
    session: Optional[Session],
    reason: Optional[str] = None,
    enabled: bool = True,
    routing: Optional[RoutingConfig] = None,
) -> Optional[str]:
    """Return the route *session* should be sent to, or None when nothing to do.

    None means redirects are disabled or there is no session/store yet.
    """
    if not enabled or session is None or store is None:
        return None

    resolution = resolve_role_redirect(store, session, routing)
    logger.info(
        "Redirecting user %s (%s) to %s%s",
        session.user.id,
        resolution.role or "unknown",
        resolution.destination,
        f" [{reason}]" if reason else "",
    )
    return resolution.destination
