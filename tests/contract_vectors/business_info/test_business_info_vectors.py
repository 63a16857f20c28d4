"""Contract vector tests for the business-info submission pipeline.

Each vector is a committed (fixture, golden) pair. The test asserts text
identity between run_vector(fixture) and the golden file, giving a regression
guard for payload shape, key ordering, field-error messages and number
formatting.
"""
import json
import pathlib

import pytest

from brm_dashboard.verify import run_vector, run_verify

_HERE = pathlib.Path(__file__).parent
_FIXTURES = _HERE / "fixtures"
_GOLDENS = _HERE / "goldens"

_NAMES = ["valid_profile", "invalid_fields", "missing_offer_names"]


def _load_fixture(name: str) -> dict:
    with (_FIXTURES / f"{name}.json").open("r", encoding="utf-8") as f:
        return json.load(f)


def _load_golden(name: str) -> str:
    return (_GOLDENS / f"{name}.expected.json").read_text(encoding="utf-8")


@pytest.mark.parametrize("name", _NAMES)
def test_byte_identity(name):
    assert run_vector(_load_fixture(name)) == _load_golden(name)


@pytest.mark.parametrize("name", _NAMES)
def test_deterministic(name):
    fixture = _load_fixture(name)
    assert run_vector(fixture) == run_vector(fixture)


def test_valid_vector_is_a_payload():
    produced = json.loads(run_vector(_load_fixture("valid_profile")))
    assert produced["brm_level"] == "level_2_3"
    assert len(produced["offers"]) == 3


def test_run_verify():
    assert run_verify() is True
