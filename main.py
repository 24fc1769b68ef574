#!/usr/bin/env python3
"""
SaltGate -- salted challenge-response password login.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py salt alice
  python main.py register alice --email alice@example.com
  python main.py login alice
  python main.py profile <token>
  python main.py login alice --url http://auth.internal:3000

Passwords are read with getpass, never from argv. The server URL defaults to
http://localhost:3000 or the SALTGATE_URL environment variable.

Environment variables (server):
  SECRET_KEY     Token signing key, at least 32 chars. Required unless DEBUG=true.
  DATABASE_URL   SQLAlchemy URL, or memory:// for a throwaway in-memory store.
  SALT_PEPPER    Server constant mixed into every derived salt.
"""

import argparse
import getpass
import json
import os
import sys

from client.api import DEFAULT_BASE_URL, AuthClient, ClientError


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from core.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "api.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )
    return 0


def _print(data) -> None:
    print(json.dumps(data, indent=2))


def _run_client(args: argparse.Namespace) -> int:
    client = AuthClient(args.url)
    try:
        if args.command == "salt":
            print(client.get_salt(args.username))
        elif args.command == "register":
            password = getpass.getpass("Password: ")
            user_id = client.register(args.username, password, email=args.email)
            print(f"  Registered {args.username} (id {user_id})")
        elif args.command == "login":
            password = getpass.getpass("Password: ")
            result = client.login(args.username, password)
            if args.token_only:
                print(result["token"])
            else:
                _print(result)
        elif args.command == "profile":
            _print(client.profile(args.token))
    except ClientError as e:
        print(f"  [!] {e.message} (HTTP {e.status_code})", file=sys.stderr)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SaltGate -- salted challenge-response password login.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST setting)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT setting)")
    serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes (dev only)")

    url_default = os.environ.get("SALTGATE_URL", DEFAULT_BASE_URL)

    salt = sub.add_parser("salt", help="Print the salt for a username")
    salt.add_argument("username")

    register = sub.add_parser("register", help="Create an account")
    register.add_argument("username")
    register.add_argument("--email", default=None)

    login = sub.add_parser("login", help="Log in and print the session token")
    login.add_argument("username")
    login.add_argument("--token-only", action="store_true", help="Print only the token")

    profile = sub.add_parser("profile", help="Show the identity behind a token")
    profile.add_argument("token")

    for p in (salt, register, login, profile):
        p.add_argument("--url", default=url_default, help=f"Server base URL (default: {url_default})")

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "serve":
        return _serve(args)
    return _run_client(args)


if __name__ == "__main__":
    sys.exit(main())
