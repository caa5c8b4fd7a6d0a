"""Tern CLI — inspect the endpoints an app serves.

Entry point registered as ``tern`` in ``pyproject.toml``::

    [project.scripts]
    tern = "tern.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``tern`` command."""
    parser = argparse.ArgumentParser(
        prog="tern",
        description="Tern — declarative RPC controllers.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- tern routes ------------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List served endpoints")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- tern client ------------------------------------------------------
    client_parser = subparsers.add_parser("client", help="Print the client stub bundle")
    client_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    client_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the endpoint manifest as JSON instead of JavaScript",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from tern.cli._routes import run_routes

        run_routes(args)
    elif args.command == "client":
        from tern.cli._client import run_client

        run_client(args)
