#!/usr/bin/env python3
"""
Employee Auth -- command-line entry point.

Usage:
  python main.py create-user john "John Doe" john@example.com
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080

create-user runs the same register workflow as POST /api/v1/users: the
password is generated, hashed, stored and emailed through the configured
transport (EMAIL_PROVIDER=console prints it to this terminal).

Environment variables:
  SECRET_KEY      Token signing key (>= 32 chars). Required unless DEBUG=true.
  DATABASE_URL    SQLAlchemy URL. Defaults to auth/employeeauth.db.
  EMAIL_PROVIDER  "console" (default) or "smtp".
"""

import argparse
import sys
from typing import Optional

from auth.errors import AuthServiceError, NotificationError
from auth.service import build_credential_service
from auth.store import DEFAULT_DB_URL, UserStore
from core.config import get_settings


def _create_user(args: argparse.Namespace) -> int:
    settings = get_settings()
    store = UserStore(settings.database_url or DEFAULT_DB_URL)
    try:
        service = build_credential_service(settings, store)
        user_id = service.register(args.username, args.name, args.email)
    except NotificationError as exc:
        print(f"  [!] User {exc.user_id} created, but the password email could not be sent.")
        return 2
    except AuthServiceError as exc:
        print(f"  [!] {exc.message}")
        return 1
    finally:
        store.close()
    print(f"  Created user {user_id}")
    return 0


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="employee-auth",
        description="Employee registration and login service.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-user", help="Register a user and email the generated password.")
    create.add_argument("username")
    create.add_argument("name")
    create.add_argument("email")
    create.set_defaults(func=_create_user)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=_serve)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
