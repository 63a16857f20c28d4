"""Business profile, form state, store row and auth session models.

Raw form state is all strings, exactly as typed by the user; the submission
models are the typed shape a payload has after schema validation.
extra="ignore" on every model keeps rows from the hosted database loadable
when new columns appear.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

BrmLevel = Literal["level_1", "level_2", "level_3", "level_2_3", "level_4"]
OfferType = Literal[
    "service", "coaching", "agency", "saas", "ecommerce", "local_bm", "info_product",
]
RevenueBand = Literal["pre_revenue", "lt_250k", "_250k_to_1m", "_1m_to_5m", "gt_5m"]
TrafficSource = Literal["organic", "paid", "referrals", "partnerships", "other"]
RetentionModel = Literal["one_off", "package", "subscription", "retainer", "none"]
FulfillmentType = Literal["one_to_one", "group", "self_serve", "hybrid"]
OfferSlot = Literal[1, 2, 3]
SupportedRole = Literal["mentor_admin", "mentor", "client"]

# int first: integral values stay ints in the payload.
Number = Union[int, float]


# ── Raw form state ────────────────────────────────────────────────────────────


class OfferFormState(BaseModel):
    """One offer slot as entered in the form (all text)."""

    model_config = ConfigDict(extra="ignore")

    slot: OfferSlot
    name: str = ""
    price_point: str = ""
    fulfillment_type: str = ""
    primary_outcome: str = ""


class BusinessInfoFormState(BaseModel):
    model_config = ConfigDict(extra="ignore")

    offer_type: str = ""
    core_promise: str = ""
    avg_txn_value: str = ""
    revenue_band: str = ""
    traffic_source: str = ""
    retention_model: str = ""
    has_upsells: bool = False
    notes: str = ""
    offers: List[OfferFormState] = []


# ── Validated submission ──────────────────────────────────────────────────────


class OfferSubmission(BaseModel):
    model_config = ConfigDict(extra="ignore")

    slot: OfferSlot
    name: Optional[str]
    price_point: Optional[Number]
    fulfillment_type: Optional[FulfillmentType]
    primary_outcome: Optional[str]


class BusinessProfileSubmission(BaseModel):
    """A business-information submission that passed SUBMISSION_SCHEMA."""

    model_config = ConfigDict(extra="ignore")

    offer_type: OfferType
    core_promise: str
    avg_txn_value: Optional[Number]
    revenue_band: RevenueBand
    traffic_source: Optional[TrafficSource]
    retention_model: Optional[RetentionModel]
    has_upsells: bool
    notes: str
    offers: List[OfferSubmission]


# ── Store rows ────────────────────────────────────────────────────────────────


class BusinessContextRow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: str
    brm_level: BrmLevel
    offer_type: OfferType
    core_promise: str
    avg_txn_value: Optional[Number] = None
    revenue_band: RevenueBand
    traffic_source: Optional[TrafficSource] = None
    retention_model: Optional[RetentionModel] = None
    has_upsells: bool = False
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class OfferStackRow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: str
    slot: OfferSlot
    name: str
    price_point: Optional[Number] = None
    fulfillment_type: Optional[FulfillmentType] = None
    primary_outcome: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# ── Auth ──────────────────────────────────────────────────────────────────────


class AuthUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    app_metadata: Optional[Dict[str, Any]] = None
    user_metadata: Optional[Dict[str, Any]] = None


class Session(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user: AuthUser


class RoleResolution(BaseModel):
    destination: str
    role: Optional[SupportedRole] = None
