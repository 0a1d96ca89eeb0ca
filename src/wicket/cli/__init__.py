"""Wicket CLI — dev server, batch jobs and route listing.

Entry point registered as ``wicket`` in ``pyproject.toml``::

    [project.scripts]
    wicket = "wicket.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``wicket`` command."""
    parser = argparse.ArgumentParser(
        prog="wicket",
        description="Wicket — a small, security-first request dispatcher.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- wicket run -------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the development server")
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")

    # -- wicket batch -----------------------------------------------------
    batch_parser = subparsers.add_parser("batch", help="List or run batch jobs")
    batch_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    batch_parser.add_argument("job", nargs="?", default=None, help="Job to run; omit to list")

    # -- wicket routes ----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from wicket.cli._run import run_server

        run_server(args)
    elif args.command == "batch":
        from wicket.cli._batch import run_batch

        sys.exit(run_batch(args))
    elif args.command == "routes":
        from wicket.cli._routes import run_routes

        run_routes(args)
