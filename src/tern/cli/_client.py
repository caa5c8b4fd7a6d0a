"""``tern client`` — print what a caller-side stub needs."""

import argparse
import json
import sys

from tern.cli._resolve import resolve_app
from tern.errors import ConfigurationError


def run_client(args: argparse.Namespace) -> None:
    """Print the client bundle, or the manifest with ``--json``."""
    try:
        app = resolve_app(args.app)
        output = (
            json.dumps(app.client_manifest(), indent=2)
            if args.json
            else app.client_script()
        )
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    sys.stdout.write(output.rstrip("\n") + "\n")
