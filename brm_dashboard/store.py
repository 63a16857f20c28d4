"""
store.py — Data store seam: query/RPC protocol plus a local file-backed store.

The hosted database owns schema, auth and row-level security.  Application
code only ever needs two calls from it:

    select(table, match=..., order_by=...)  → list of row dicts
    rpc(function, params)                    → function result

LocalDataStore implements both against JSON files so the form and role flows
run offline.  Layout under <base_dir>/:

    business_context.json   ← one row per user_id
    offer_stack.json        ← up to three rows per user_id (slots 1-3)
    profiles.json           ← {"id": ..., "role": ...}

Files are written with sorted keys, 2-space indent and a trailing newline so
identical table states always produce identical bytes.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class DataStoreError(Exception):
    """A query or RPC against the data store failed."""


class DataStore(Protocol):
    def select(
        self,
        table: str,
        *,
        match: Dict[str, Any],
        order_by: Optional[str] = None,
    ) -> List[Row]:
        ...

    def rpc(self, function: str, params: Dict[str, Any]) -> Any:
        ...


def maybe_single(store: DataStore, table: str, match: Dict[str, Any]) -> Optional[Row]:
    """Return the single matching row, or None when nothing matches.

    Raises:
        DataStoreError: more than one row matched.
    """
    rows = store.select(table, match=match)
    if len(rows) > 1:
        raise DataStoreError(
            f"Expected at most one row from {table} for {match!r}, got {len(rows)}"
        )
    return rows[0] if rows else None


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class LocalDataStore:
    """JSON-file implementation of DataStore.

    Args:
        base_dir: Directory holding one ``<table>.json`` file per table.
        user_id:  Authenticated user; RPCs act on this user's rows only.
        clock:    Timestamp source for created_at/updated_at.
    """

    def __init__(
        self,
        base_dir: str | Path,
        user_id: Optional[str] = None,
        clock: Callable[[], str] = _utc_now,
    ):
        self.base_dir = Path(base_dir)
        self.user_id = user_id
        self._clock = clock
        self._functions: Dict[str, Callable[[Dict[str, Any]], Any]] = {
            "upsert_brm_profile": self._upsert_brm_profile,
        }

    # ------------------------------------------------------------------
    # Table files
    # ------------------------------------------------------------------

    def _table_path(self, table: str) -> Path:
        return self.base_dir / f"{table}.json"

    def _load_table(self, table: str) -> List[Row]:
        path = self._table_path(table)
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                rows = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DataStoreError(f"Corrupt table file {path}: {exc}") from exc
        except OSError as exc:
            raise DataStoreError(f"Cannot read table file {path}: {exc}") from exc
        if not isinstance(rows, list):
            raise DataStoreError(f"Table file {path} must hold a JSON array")
        if not all(isinstance(row, dict) for row in rows):
            raise DataStoreError(f"Table file {path} must hold only JSON objects")
        return rows

    def _save_table(self, table: str, rows: List[Row]) -> None:
        path = self._table_path(table)
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(rows, f, sort_keys=True, indent=2, ensure_ascii=False)
                f.write("\n")
        except OSError as exc:
            raise DataStoreError(f"Cannot write table file {path}: {exc}") from exc

    # ------------------------------------------------------------------
    # DataStore
    # ------------------------------------------------------------------

    def select(
        self,
        table: str,
        *,
        match: Dict[str, Any],
        order_by: Optional[str] = None,
    ) -> List[Row]:
        rows = [
            row for row in self._load_table(table)
            if all(row.get(k) == v for k, v in match.items())
        ]
        if order_by is not None:
            rows.sort(key=lambda row: row.get(order_by))
        return rows

    def rpc(self, function: str, params: Dict[str, Any]) -> Any:
        handler = self._functions.get(function)
        if handler is None:
            raise DataStoreError(f"Unknown function: {function}")
        if not self.user_id:
            raise DataStoreError("Not authenticated")
        return handler(params)

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def _upsert_brm_profile(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Upsert the caller's business_context row and replace their offers.

        Offers without a name are not stored (offer_stack.name is required).
        """
        payload = params.get("payload")
        if not isinstance(payload, dict):
            raise DataStoreError("upsert_brm_profile requires a payload object")

        user_id = self.user_id
        now = self._clock()

        contexts = self._load_table("business_context")
        existing = next((r for r in contexts if r.get("user_id") == user_id), None)
        context = {
            "user_id": user_id,
            "brm_level": payload.get("brm_level"),
            "offer_type": payload.get("offer_type"),
            "core_promise": payload.get("core_promise"),
            "avg_txn_value": payload.get("avg_txn_value"),
            "revenue_band": payload.get("revenue_band"),
            "traffic_source": payload.get("traffic_source"),
            "retention_model": payload.get("retention_model"),
            "has_upsells": bool(payload.get("has_upsells", False)),
            "notes": payload.get("notes"),
            "created_at": existing.get("created_at") if existing else now,
            "updated_at": now,
        }
        contexts = [r for r in contexts if r.get("user_id") != user_id] + [context]

        offers = [r for r in self._load_table("offer_stack") if r.get("user_id") != user_id]
        saved_slots: List[int] = []
        for offer in payload.get("offers") or []:
            if not offer.get("name"):
                continue
            offers.append({
                "user_id": user_id,
                "slot": offer.get("slot"),
                "name": offer["name"],
                "price_point": offer.get("price_point"),
                "fulfillment_type": offer.get("fulfillment_type"),
                "primary_outcome": offer.get("primary_outcome"),
                "created_at": now,
                "updated_at": now,
            })
            saved_slots.append(offer.get("slot"))

        self._save_table("business_context", contexts)
        self._save_table("offer_stack", offers)
        logger.info(
            "Upserted BRM profile for user %s (offer slots %s)", user_id, saved_slots
        )
        return {"user_id": user_id, "offer_slots": saved_slots}
