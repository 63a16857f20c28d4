"""brm-dashboard CLI entry point."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="brm-dashboard",
        description="BRM dashboard — business profile validation and workspace routing",
    )
    parser.add_argument(
        "--config", metavar="config.yaml", default=None,
        help="YAML configuration file (default: $BRM_DASHBOARD_CONFIG)",
    )
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for diagnostics on stderr",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.add_parser("verify", help="Run business-info contract vector verification")

    validate_parser = sub.add_parser(
        "validate-business-info",
        help="Validate a business-info submission JSON file",
    )
    validate_parser.add_argument(
        "--input", required=True, metavar="submission.json",
        help="Path to a submission JSON file",
    )

    submit_parser = sub.add_parser(
        "submit-business-info",
        help="Validate raw form state and upsert it into the local store",
    )
    submit_parser.add_argument(
        "--form", required=True, metavar="form.json",
        help="Path to a business-info form state JSON file",
    )
    submit_parser.add_argument("--user-id", required=True, help="Authenticated user id")
    submit_parser.add_argument("--brm-level", required=True, help="Programme level, e.g. level_1")
    submit_parser.add_argument("--store-dir", default=None, help="Local data store directory")
    submit_parser.add_argument("--upsell-name", default="", help="Upsell/downsell offer name")
    submit_parser.add_argument("--upsell-timing", default="", help="When the upsell is offered")

    role_parser = sub.add_parser(
        "resolve-role",
        help="Print the workspace route for an auth session",
    )
    role_parser.add_argument(
        "--session", required=True, metavar="session.json",
        help="Path to an auth session JSON file",
    )
    role_parser.add_argument("--store-dir", default=None, help="Local data store directory")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    from brm_dashboard.config import ConfigError, load_config
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)

    if args.command == "verify":
        from brm_dashboard.verify import run_verify
        if run_verify():
            print("OK: brm-dashboard verified")
            sys.exit(0)
        else:
            print("ERROR: brm-dashboard verification failed")
            sys.exit(1)
    elif args.command == "validate-business-info":
        from brm_dashboard.business_info import validate_submission
        try:
            submission = load_json_file(Path(args.input))
        except ValueError as exc:
            print(f"ERROR: {exc}")
            sys.exit(1)
        validation = validate_submission(submission)
        if not validation.success:
            _print_field_errors(validation.field_errors)
            sys.exit(1)
        print("OK: business info is valid")
        sys.exit(0)
    elif args.command == "submit-business-info":
        submit_form(args, config)
    elif args.command == "resolve-role":
        resolve_role(args, config)
    else:
        parser.print_help()
        sys.exit(1)


def load_json_file(path: Path) -> Any:
    """Load JSON from *path*.

    Raises:
        ValueError: if the file is missing or contains invalid JSON.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ValueError(f"File not found: {path}") from exc

    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc


def _print_field_errors(field_errors: dict) -> None:
    print("ERROR: invalid business info")
    for path, message in field_errors.items():
        print(f"{path}: {message}")


def submit_form(args: argparse.Namespace, config) -> None:
    """Validate a form state file and upsert it; exit 0 only when saved."""
    from pydantic import ValidationError

    from brm_dashboard.business_info import BRM_LEVELS, submit_business_info
    from brm_dashboard.models import BusinessInfoFormState
    from brm_dashboard.store import LocalDataStore

    if args.brm_level not in BRM_LEVELS:
        print(f"ERROR: unknown BRM level {args.brm_level!r}")
        sys.exit(1)

    try:
        form = BusinessInfoFormState.model_validate(load_json_file(Path(args.form)))
    except (ValueError, ValidationError):
        print("ERROR: invalid form state")
        sys.exit(1)

    store = LocalDataStore(args.store_dir or config.store.base_dir, user_id=args.user_id)
    outcome = submit_business_info(
        store, args.brm_level, form,
        upsell_name=args.upsell_name, upsell_timing=args.upsell_timing,
    )
    if outcome.field_errors:
        _print_field_errors(outcome.field_errors)
        sys.exit(1)
    if outcome.submission_error:
        print(f"ERROR: {outcome.submission_error}")
        sys.exit(1)
    print("OK: business info saved")
    sys.exit(0)


def resolve_role(args: argparse.Namespace, config) -> None:
    """Print the destination route for a session file."""
    from pydantic import ValidationError

    from brm_dashboard.models import Session
    from brm_dashboard.roles import resolve_role_redirect
    from brm_dashboard.store import LocalDataStore

    try:
        session = Session.model_validate(load_json_file(Path(args.session)))
    except (ValueError, ValidationError):
        print("ERROR: invalid session")
        sys.exit(1)

    store = LocalDataStore(args.store_dir or config.store.base_dir)
    resolution = resolve_role_redirect(store, session, config.routing)
    print(resolution.destination)
    sys.exit(0)


if __name__ == "__main__":
    main()
