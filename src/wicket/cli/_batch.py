"""``wicket batch`` — list or run an app's batch jobs."""

import argparse

from wicket.cli._resolve import resolve_or_exit


def run_batch(args: argparse.Namespace) -> int:
    """Run ``args.job`` on the resolved app, or list jobs when it is omitted.

    Returns the process exit status.
    """
    app = resolve_or_exit(args)
    return app.run_batch([args.job] if args.job else [])
