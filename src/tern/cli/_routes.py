"""``tern routes`` — list served endpoints."""

import argparse
import sys

from tern.cli._resolve import resolve_app
from tern.errors import ConfigurationError


def run_routes(args: argparse.Namespace) -> None:
    """Print a table of VERB, PATH, PARAMS and the declaring method."""
    try:
        app = resolve_app(args.app)
        endpoints = app.endpoints
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not endpoints:
        print("No endpoints registered.")
        return

    rows = [
        (e.verb, e.path, str(e.parameter_count), f"{e.owner}.{e.name}")
        for e in endpoints
    ]
    max_verb = max(6, *(len(r[0]) for r in rows))
    max_path = max(4, *(len(r[1]) for r in rows))

    fmt = f"{{:<{max_verb}}}  {{:<{max_path}}}  {{:>6}}  {{}}"
    print(fmt.format("VERB", "PATH", "PARAMS", "METHOD"))
    sep_len = max_verb + max_path + 12 + max(len(r[3]) for r in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))
