"""iot-probe: exercise the live API's authentication and authorization.

Credentials come from PROBE_* environment variables (or .env), never
from the command line history or source.

Usage:
  iot-probe login
  iot-probe decode <TOKEN> [--verify]
  iot-probe check POST /api/devices --json '{"device_id": "x", "name": "x", "type": "sensor"}' --expect 201
  iot-probe diagnose
  iot-probe authorize viewer admin editor

Exit codes: 0 ok, 1 expectation failed, 2 usage/configuration error,
3 API unreachable.
"""

import argparse
import json
import logging
import sys
from typing import Any, Optional
from uuid import uuid4

import httpx
import jwt

from probes.client import ApiProbe, LoginFailed, ProbeConfigError, ProbeError
from probes.settings import ProbeSettings, get_probe_settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_UNREACHABLE = 3


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _print_response(response: httpx.Response) -> None:
    print(f"Status: {response.status_code}")
    try:
        _print_json(response.json())
    except ValueError:
        if response.text:
            print(response.text)


def _decode(token: str) -> tuple[dict, dict]:
    from core.security import decode_unverified

    return decode_unverified(token)


def cmd_login(args: argparse.Namespace, probe: ApiProbe) -> int:
    session = probe.login()
    header, payload = _decode(session["token"])
    print(f"Logged in as {session['user'].get('username')} (role: {session['user'].get('role')})")
    print("User:")
    _print_json(session["user"])
    print("Token header:")
    _print_json(header)
    print("Token claims:")
    _print_json(payload)
    return EXIT_OK


def cmd_decode(args: argparse.Namespace, settings: ProbeSettings) -> int:
    try:
        header, payload = _decode(args.token)
    except jwt.PyJWTError as e:
        print(f"Not a JWT: {e}", file=sys.stderr)
        return EXIT_FAILED

    print("Header:")
    _print_json(header)
    print("Payload:")
    _print_json(payload)

    if not args.verify:
        return EXIT_OK

    if not settings.JWT_SECRET:
        print("PROBE_JWT_SECRET must be set for --verify", file=sys.stderr)
        return EXIT_USAGE
    try:
        jwt.decode(args.token, settings.JWT_SECRET, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        print("Signature: valid, token EXPIRED")
        return EXIT_FAILED
    except jwt.InvalidTokenError as e:
        print(f"Signature: INVALID ({type(e).__name__})")
        return EXIT_FAILED
    print("Signature: valid")
    return EXIT_OK


def cmd_check(args: argparse.Namespace, probe: ApiProbe) -> int:
    body = None
    if args.json is not None:
        try:
            body = json.loads(args.json)
        except ValueError as e:
            print(f"--json is not valid JSON: {e}", file=sys.stderr)
            return EXIT_USAGE

    token = None if args.no_auth else probe.login()["token"]
    response = probe.request(args.method, args.path, token=token, json=body)

    print(f"{args.method.upper()} {args.path}")
    _print_response(response)

    if args.expect is None:
        ok = response.is_success
        expected = "2xx"
    else:
        ok = response.status_code == args.expect
        expected = str(args.expect)
    print(f"Expected {expected}: {'OK' if ok else 'MISMATCH'}")
    return EXIT_OK if ok else EXIT_FAILED


def cmd_diagnose(args: argparse.Namespace, probe: ApiProbe) -> int:
    """Compare the role as seen by login, the token and /auth/verify, then try a guarded call."""
    session = probe.login()
    token = session["token"]
    login_role = session["user"].get("role")
    _, claims = _decode(token)
    token_role = claims.get("role")
    print(f"[1] login response role: {login_role!r}")
    print(f"[2] token role claim:    {token_role!r}  (expires {claims.get('exp')})")

    verify = probe.request("GET", "/api/auth/verify", token=token)
    if verify.status_code != 200:
        print(f"[3] /api/auth/verify -> HTTP {verify.status_code}")
        _print_response(verify)
        return EXIT_FAILED
    verified = verify.json()
    server_role = verified["user"].get("role")
    print(f"[3] server-resolved role: {server_role!r}  (role_changed: {verified.get('role_changed')})")

    consistent = login_role == token_role == server_role
    if not consistent:
        print("    roles disagree: the account's role changed after the token was issued; log in again")

    device_id = f"probe-{uuid4().hex[:8]}"
    created = probe.request(
        "POST",
        "/api/devices",
        token=token,
        json={"device_id": device_id, "name": "probe device", "type": "probe"},
    )
    if created.status_code == 201:
        print(f"[4] POST /api/devices -> 201, guard allowed role {server_role!r}")
        cleanup = probe.request("DELETE", f"/api/devices/{created.json()['id']}", token=token)
        if cleanup.status_code != 200:
            print(f"    cleanup of {device_id} -> HTTP {cleanup.status_code}; delete it manually")
    else:
        try:
            detail = created.json()
        except ValueError:
            detail = {}
        print(
            f"[4] POST /api/devices -> {created.status_code} "
            f"{detail.get('error_code', '')}, required roles: {detail.get('required_roles')}"
        )

    return EXIT_OK if consistent else EXIT_FAILED


def cmd_authorize(args: argparse.Namespace) -> int:
    from core.exceptions import RoleConfigurationError
    from core.rbac import authorize

    try:
        decision = authorize(args.role, args.allowed)
    except RoleConfigurationError as e:
        print(f"Invalid permitted roles: {e}", file=sys.stderr)
        return EXIT_USAGE

    _print_json(
        {
            "allowed": decision.allowed,
            "reason": decision.reason.value if decision.reason else None,
            "role": decision.role,
            "permitted": sorted(decision.permitted),
        }
    )
    return EXIT_OK if decision.allowed else EXIT_FAILED


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iot-probe",
        description="Probe the IoT control API's authentication and role guard.",
    )
    parser.add_argument("--base-url", help="Override PROBE_BASE_URL")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log retries and debug output")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("login", help="Log in and show the user and token claims")

    decode = sub.add_parser("decode", help="Show a token's header and claims")
    decode.add_argument("token")
    decode.add_argument("--verify", action="store_true", help="Check the signature with PROBE_JWT_SECRET")

    check = sub.add_parser("check", help="Call an endpoint and compare the status code")
    check.add_argument("method", type=str.upper, choices=["GET", "POST", "PUT", "PATCH", "DELETE"])
    check.add_argument("path", help="Request path, e.g. /api/devices")
    check.add_argument("--json", help="JSON request body")
    check.add_argument("--expect", type=int, help="Expected status code (default: any 2xx)")
    check.add_argument("--no-auth", action="store_true", help="Send the request without a token")

    sub.add_parser("diagnose", help="Compare login, token and server-side roles; try a guarded call")

    authz = sub.add_parser("authorize", help="Evaluate the role guard offline")
    authz.add_argument("role", help="Caller role ('' for none)")
    authz.add_argument("allowed", nargs="+", help="Permitted roles")

    return parser


def main(argv: Optional[list[str]] = None, transport: Optional[httpx.BaseTransport] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    from core.logging_config import setup_logging

    setup_logging(level="DEBUG" if args.verbose else "WARNING", fmt="text", stream=sys.stderr)

    if args.command == "authorize":
        return cmd_authorize(args)

    settings = get_probe_settings()
    if args.base_url:
        settings = settings.model_copy(update={"BASE_URL": args.base_url})

    if args.command == "decode":
        return cmd_decode(args, settings)

    commands = {"login": cmd_login, "check": cmd_check, "diagnose": cmd_diagnose}
    try:
        with ApiProbe(settings, transport=transport) as probe:
            return commands[args.command](args, probe)
    except ProbeConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except LoginFailed as e:
        print(f"Login failed: HTTP {e.response.status_code}", file=sys.stderr)
        return EXIT_FAILED
    except ProbeError as e:
        print(f"Unreachable: {e}", file=sys.stderr)
        return EXIT_UNREACHABLE


if __name__ == "__main__":
    raise SystemExit(main())
