"""brm-dashboard verify — run the committed business-info contract vectors."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from brm_dashboard.business_info import build_payload, build_submission, validate_submission
from brm_dashboard.contract_validate import validate_payload
from brm_dashboard.models import BusinessInfoFormState

logger = logging.getLogger(__name__)

_REPO_ROOT = Path(__file__).resolve().parent.parent
_VECTORS = _REPO_ROOT / "tests" / "contract_vectors" / "business_info"
_FIXTURES = _VECTORS / "fixtures"
_GOLDENS = _VECTORS / "goldens"


def dump_canonical(data: Any) -> str:
    """Sorted keys, 2-space indent, trailing newline."""
    return json.dumps(data, sort_keys=True, indent=2, ensure_ascii=False) + "\n"


def run_vector(fixture: Dict[str, Any]) -> str:
    """Form fixture → canonical payload (valid) or field-error map (invalid).

    Fixture shape::

        {"brm_level": "...", "upsell_name": "...", "upsell_timing": "...",
         "form": {<BusinessInfoFormState>}}
    """
    form = BusinessInfoFormState.model_validate(fixture["form"])
    validation = validate_submission(build_submission(form))
    if not validation.success:
        return dump_canonical(validation.field_errors)

    payload = build_payload(
        fixture["brm_level"],
        validation.profile,
        fixture.get("upsell_name", ""),
        fixture.get("upsell_timing", ""),
    )
    validate_payload(payload)
    return dump_canonical(payload)


def _run_all() -> Dict[str, str]:
    results: Dict[str, str] = {}
    for fixture_path in sorted(_FIXTURES.glob("*.json")):
        with fixture_path.open("r", encoding="utf-8") as f:
            results[fixture_path.stem] = run_vector(json.load(f))
    return results


def _check_against_goldens(artifacts: Dict[str, str]) -> bool:
    if not artifacts:
        return False
    for name, produced in artifacts.items():
        golden = (_GOLDENS / f"{name}.expected.json").read_text(encoding="utf-8")
        if produced != golden:
            logger.error("Vector %s does not match its golden file", name)
            return False
    return True


def run_verify() -> bool:
    """Run every vector twice; True only if both runs match the goldens and each other."""
    try:
        run1 = _run_all()
        run2 = _run_all()
        return _check_against_goldens(run1) and run1 == run2
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return False
