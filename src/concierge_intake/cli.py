# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Operator command line: invite links, admin password hashes, dev server.

Usage:
    concierge-intake make-invite --email ava@example.com --name "Ava Stone" --code VIP456
    concierge-intake hash-password "s3cret"
    concierge-intake verify-password "s3cret" '$pbkdf2-sha256$...'
    concierge-intake serve
"""

import argparse
import sys

from concierge_intake.config import Settings, get_settings
from concierge_intake.services.admin_auth import hash_password, verify_password
from concierge_intake.services.token_codec import build_invite_url, issue_invite_token

INVITE_SUBJECT = "Private access - RSVP"


def invite_email_body(name: str, url: str) -> str:
    greeting = f"Hi {name}".strip() if name else "Hi"
    return (
        f"{greeting},\n\n"
        "You've been selected to join a small, Mediterranean-inspired dinner in NYC. "
        "Capacity is limited. Please confirm via the private link below.\n\n"
        f"{url}\n\n"
        "Note: location and details appear upon acceptance.\n"
        "Please do not forward."
    )


def cmd_make_invite(args: argparse.Namespace, settings: Settings) -> int:
    email = args.email.strip()
    if not email:
        print("Error: --email is required", file=sys.stderr)
        return 1
    if not settings.invite_signing_secret:
        print("Error: INTAKE_INVITE_SIGNING_SECRET is not set", file=sys.stderr)
        return 1

    days = args.days if args.days is not None else settings.invite_expiry_days
    if days <= 0:
        print("Error: --days must be positive", file=sys.stderr)
        return 1

    token = issue_invite_token(email, days * 24 * 60 * 60, settings.invite_signing_secret)
    url = build_invite_url(
        settings.invite_base_url,
        token,
        code=args.code.strip() or None,
        name=args.name.strip() or None,
    )

    print("Invite created")
    print(f"Name  : {args.name.strip() or '(none)'}")
    print(f"Email : {email}")
    print(f"Code  : {args.code.strip() or '(none)'}")
    print(f"Expires in (days): {days}")
    print("Invite URL:")
    print(url)
    print("\n--- Suggested email ---")
    print(f"Subject: {INVITE_SUBJECT}")
    print("Body:")
    print(invite_email_body(args.name.strip(), url))
    return 0


def cmd_hash_password(args: argparse.Namespace, settings: Settings) -> int:
    if not args.password:
        print("Error: password must not be empty", file=sys.stderr)
        return 1
    print(hash_password(args.password))
    print("\nSet this as INTAKE_ADMIN_PASSWORD_HASH", file=sys.stderr)
    return 0


def cmd_verify_password(args: argparse.Namespace, settings: Settings) -> int:
    matches = verify_password(args.password, args.password_hash)
    print(f"Password matches hash? {matches}")
    return 0 if matches else 1


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    uvicorn.run(
        "concierge_intake.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=settings.debug,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="concierge-intake",
        description="Concierge intake operator tools",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    invite = subparsers.add_parser("make-invite", help="Create a signed invite link")
    invite.add_argument("--email", required=True, help="Invitee email address")
    invite.add_argument("--name", default="", help="Guest name to prefill on the RSVP form")
    invite.add_argument("--code", default="", help="Access code to prefill")
    invite.add_argument("--days", type=int, default=None, help="Days until the link expires")
    invite.set_defaults(handler=cmd_make_invite)

    hasher = subparsers.add_parser("hash-password", help="Hash an admin password")
    hasher.add_argument("password")
    hasher.set_defaults(handler=cmd_hash_password)

    verifier = subparsers.add_parser("verify-password", help="Check a password against a hash")
    verifier.add_argument("password")
    verifier.add_argument("password_hash")
    verifier.set_defaults(handler=cmd_verify_password)

    serve = subparsers.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(handler=cmd_serve)

    return parser


def main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.handler(args, settings or get_settings())


if __name__ == "__main__":
    sys.exit(main())
