"""Check upsert_brm_profile payloads against the committed JSON Schema contract."""
import json
from pathlib import Path

import jsonschema

CONTRACTS_DIR = Path(__file__).resolve().parent / "contracts"
PAYLOAD_CONTRACT = "BrmProfilePayload.v1.json"


def load_schema(name: str) -> dict:
    """Read contracts/<name>; raises FileNotFoundError when it is not committed."""
    schema_path = CONTRACTS_DIR / name
    try:
        text = schema_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise FileNotFoundError(f"Missing contract schema: {schema_path}") from None
    return json.loads(text)


def validate_payload(payload: dict) -> None:
    """Validate an upsert_brm_profile payload against BrmProfilePayload.v1.json.

    Raises jsonschema.ValidationError if non-conformant.
    """
    jsonschema.validate(payload, load_schema(PAYLOAD_CONTRACT))
