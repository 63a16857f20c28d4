"""
business_info.py — Business-information form: build, validate, submit.

Submission pipeline:
  1. build_submission     — raw form strings → untyped submission dict
                            (trimmed text, blanks → None, numbers parsed)
  2. validate_submission  — SUBMISSION_SCHEMA.safe_parse; failure becomes a
                            {dotted path: message} map for inline field errors
  3. build_payload        — typed submission → upsert_brm_profile payload
                            (brm_level attached, upsell details folded into notes)
  4. submit_business_info — contract check, then a single store RPC

Nothing reaches the store unless step 2 succeeds.
"""
from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel

import schema_kit as s

from .contract_validate import validate_payload
from .models import (
    BrmLevel,
    BusinessContextRow,
    BusinessInfoFormState,
    BusinessProfileSubmission,
    Number,
    OfferFormState,
    OfferStackRow,
)
from .store import DataStore, DataStoreError, maybe_single

logger = logging.getLogger(__name__)

OFFER_TYPES = (
    "service",
    "coaching",
    "agency",
    "saas",
    "ecommerce",
    "local_bm",
    "info_product",
)
REVENUE_BANDS = ("pre_revenue", "lt_250k", "_250k_to_1m", "_1m_to_5m", "gt_5m")
TRAFFIC_SOURCES = ("organic", "paid", "referrals", "partnerships", "other")
RETENTION_MODELS = ("one_off", "package", "subscription", "retainer", "none")
FULFILLMENT_TYPES = ("one_to_one", "group", "self_serve", "hybrid")

BRM_LEVEL_LABELS: Dict[str, str] = {
    "level_1": "Level 1",
    "level_2": "Level 2",
    "level_3": "Level 3",
    "level_2_3": "Level 2-3",
    "level_4": "Level 4",
}
BRM_LEVEL_DESCRIPTIONS: Dict[str, str] = {
    "level_1": "Building your momentum",
    "level_2": "Expanding your growth levers",
    "level_3": "Strengthening retention systems",
    "level_2_3": "Scaling systems & team",
    "level_4": "Operating at peak performance",
}
BRM_LEVELS = tuple(BRM_LEVEL_LABELS)

OFFER_SLOT_TITLES: Dict[int, str] = {
    1: "Flagship offer",
    2: "Signature companion",
    3: "Entry pathway",
}

CORE_PROMISE_MAX_LENGTH = 120
UPSERT_FUNCTION = "upsert_brm_profile"


# ---------------------------------------------------------------------------
# Submission schema
# ---------------------------------------------------------------------------

def _offer_details_filled(offer: Dict[str, Any]) -> bool:
    return any(
        offer[key] is not None
        for key in ("price_point", "fulfillment_type", "primary_outcome")
    )


def _check_offer_names(data: Dict[str, Any], ctx: s.RefinementContext) -> None:
    offers = data["offers"]
    if not offers or offers[0]["name"] is None:
        ctx.add_issue("Your primary offer (slot 1) is required", path=["offers", 0, "name"])

    for index, offer in enumerate(offers):
        if offer["name"] is None and _offer_details_filled(offer):
            ctx.add_issue("Add a name to describe this offer", path=["offers", index, "name"])


OFFER_SCHEMA = s.object_({
    "slot": s.union([s.literal(1), s.literal(2), s.literal(3)]),
    "name": s.string()
        .min(1, "Enter a name for this offer")
        .max(120, "Keep the offer name concise")
        .or_(s.literal(None)),
    "price_point": s.number()
        .nonnegative("Use a positive number for price point")
        .nullable(),
    "fulfillment_type": s.enum_(FULFILLMENT_TYPES).nullable(),
    "primary_outcome": s.string()
        .max(80, "Keep the outcome within 80 characters")
        .or_(s.literal(None)),
})

SUBMISSION_SCHEMA = s.object_({
    "offer_type": s.enum_(OFFER_TYPES),
    "core_promise": s.string()
        .min(1, "Enter your core promise")
        .max(CORE_PROMISE_MAX_LENGTH, "Keep your core promise within 120 characters"),
    "avg_txn_value": s.number()
        .nonnegative("Use a positive number for average transaction value")
        .nullable(),
    "revenue_band": s.enum_(REVENUE_BANDS),
    "traffic_source": s.enum_(TRAFFIC_SOURCES).nullable(),
    "retention_model": s.enum_(RETENTION_MODELS).nullable(),
    "has_upsells": s.boolean(),
    "notes": s.string(),
    "offers": s.array(OFFER_SCHEMA).length(3, "Provide details for each of the three offer slots"),
}).super_refine(_check_offer_names)


# ---------------------------------------------------------------------------
# Form state → submission
# ---------------------------------------------------------------------------

_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number_input(text: str) -> Optional[Number]:
    """Parse the leading number of *text*; blank or unparseable → None.

    ``"2997"`` → 2997, ``"12.5 usd"`` → 12.5, ``"abc"`` → None.
    Integral values come back as ints.
    """
    trimmed = text.strip()
    if not trimmed:
        return None
    match = _LEADING_NUMBER.match(trimmed)
    if match is None:
        return None
    value = float(match.group(0))
    if not math.isfinite(value):
        return None
    if value.is_integer():
        return int(value)
    return value


def _blank_to_none(text: str) -> Optional[str]:
    trimmed = text.strip()
    return trimmed if trimmed else None


def build_submission(form: BusinessInfoFormState) -> Dict[str, Any]:
    """Turn raw form state into the untyped dict SUBMISSION_SCHEMA checks."""
    return {
        "offer_type": form.offer_type,
        "core_promise": form.core_promise.strip(),
        "avg_txn_value": parse_number_input(form.avg_txn_value),
        "revenue_band": form.revenue_band,
        "traffic_source": form.traffic_source or None,
        "retention_model": form.retention_model or None,
        "has_upsells": form.has_upsells,
        "notes": form.notes.strip(),
        "offers": [
            {
                "slot": offer.slot,
                "name": _blank_to_none(offer.name),
                "price_point": parse_number_input(offer.price_point),
                "fulfillment_type": offer.fulfillment_type or None,
                "primary_outcome": _blank_to_none(offer.primary_outcome),
            }
            for offer in form.offers
        ],
    }


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class BusinessInfoValidation(BaseModel):
    """Outcome of validate_submission: a typed profile or field errors."""

    profile: Optional[BusinessProfileSubmission] = None
    field_errors: Dict[str, str] = {}

    @property
    def success(self) -> bool:
        return self.profile is not None


def validate_submission(submission: Any) -> BusinessInfoValidation:
    """Validate an untyped submission dict. Never raises for invalid input."""
    result = SUBMISSION_SCHEMA.safe_parse(submission)
    if not result.success:
        return BusinessInfoValidation(field_errors=result.error.field_errors())
    return BusinessInfoValidation(profile=BusinessProfileSubmission.model_validate(result.data))


# ---------------------------------------------------------------------------
# Payload
# ---------------------------------------------------------------------------

def compose_notes(
    notes: str,
    has_upsells: bool,
    upsell_name: str = "",
    upsell_timing: str = "",
) -> str:
    """Append an ``Upsell details:`` block to *notes* when upsells are on."""
    details: List[str] = []
    if has_upsells:
        if upsell_name.strip():
            details.append(f"Upsell/Downsell: {upsell_name.strip()}")
        if upsell_timing.strip():
            details.append(f"When offered: {upsell_timing.strip()}")

    if not details:
        return notes
    block = "Upsell details:\n" + "\n".join(details)
    return f"{notes}\n\n{block}" if notes else block


def build_payload(
    brm_level: BrmLevel,
    profile: BusinessProfileSubmission,
    upsell_name: str = "",
    upsell_timing: str = "",
) -> Dict[str, Any]:
    data = profile.model_dump(mode="json")
    return {
        "brm_level": brm_level,
        "offer_type": data["offer_type"],
        "core_promise": data["core_promise"],
        "avg_txn_value": data["avg_txn_value"],
        "revenue_band": data["revenue_band"],
        "traffic_source": data["traffic_source"],
        "retention_model": data["retention_model"],
        "has_upsells": data["has_upsells"],
        "notes": compose_notes(data["notes"], data["has_upsells"], upsell_name, upsell_timing),
        "offers": [
            {
                "slot": offer["slot"],
                "name": offer["name"],
                "price_point": offer["price_point"],
                "fulfillment_type": offer["fulfillment_type"],
                "primary_outcome": offer["primary_outcome"],
            }
            for offer in data["offers"]
        ],
    }


# ---------------------------------------------------------------------------
# Submit
# ---------------------------------------------------------------------------

class SubmissionOutcome(BaseModel):
    saved: bool = False
    field_errors: Dict[str, str] = {}
    submission_error: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None


def submit_business_info(
    store: Optional[DataStore],
    brm_level: BrmLevel,
    form: BusinessInfoFormState,
    upsell_name: str = "",
    upsell_timing: str = "",
) -> SubmissionOutcome:
    """Validate *form* and, when valid, upsert it through *store*.

    Validation failures and store failures are both reported in the outcome;
    neither raises.  A payload that breaks BrmProfilePayload.v1.json raises
    jsonschema.ValidationError, since that means payload assembly is wrong.
    """
    if store is None:
        return SubmissionOutcome(
            submission_error="Data store is not configured. Please try again later."
        )

    validation = validate_submission(build_submission(form))
    if not validation.success:
        logger.info(
            "Business info rejected with %d field error(s): %s",
            len(validation.field_errors), sorted(validation.field_errors),
        )
        return SubmissionOutcome(field_errors=validation.field_errors)

    payload = build_payload(brm_level, validation.profile, upsell_name, upsell_timing)
    validate_payload(payload)

    try:
        store.rpc(UPSERT_FUNCTION, {"payload": payload})
    except DataStoreError as exc:
        logger.error("%s failed: %s", UPSERT_FUNCTION, exc)
        return SubmissionOutcome(submission_error=str(exc), payload=payload)

    return SubmissionOutcome(saved=True, payload=payload)


# ---------------------------------------------------------------------------
# Loading stored profiles back into the form
# ---------------------------------------------------------------------------

def load_business_profile(
    store: DataStore,
    user_id: str,
) -> Tuple[Optional[BusinessContextRow], List[OfferStackRow]]:
    """Fetch a user's business_context row and offer_stack rows (by slot)."""
    context = maybe_single(store, "business_context", {"user_id": user_id})
    offers = store.select("offer_stack", match={"user_id": user_id}, order_by="slot")
    return (
        BusinessContextRow.model_validate(context) if context else None,
        [OfferStackRow.model_validate(row) for row in offers],
    )


def _format_number(value: Optional[float]) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def initial_offer_states(rows: Sequence[OfferStackRow]) -> List[OfferFormState]:
    """Three form slots pre-filled from stored offers; empty where none."""
    by_slot = {row.slot: row for row in rows}
    states: List[OfferFormState] = []
    for slot in (1, 2, 3):
        row = by_slot.get(slot)
        if row is None:
            states.append(OfferFormState(slot=slot))
            continue
        states.append(OfferFormState(
            slot=slot,
            name=row.name or "",
            price_point=_format_number(row.price_point),
            fulfillment_type=row.fulfillment_type or "",
            primary_outcome=row.primary_outcome or "",
        ))
    return states


def initial_form_state(
    context: Optional[BusinessContextRow],
    offers: Sequence[OfferStackRow],
) -> BusinessInfoFormState:
    """Form state for editing a stored profile (blank form when none)."""
    offer_states = initial_offer_states(offers)
    if context is None:
        return BusinessInfoFormState(offers=offer_states)
    return BusinessInfoFormState(
        offer_type=context.offer_type,
        core_promise=context.core_promise,
        avg_txn_value=_format_number(context.avg_txn_value),
        revenue_band=context.revenue_band,
        traffic_source=context.traffic_source or "",
        retention_model=context.retention_model or "",
        has_upsells=context.has_upsells,
        notes=context.notes or "",
        offers=offer_states,
    )
