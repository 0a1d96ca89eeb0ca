"""``wicket run`` — development server command."""

import argparse

from wicket.cli._resolve import resolve_or_exit


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it with pounce.

    ``--host`` and ``--port`` override the app's config. The import
    string is forwarded so reloads pick up code changes.
    """
    app = resolve_or_exit(args)
    app._ensure_frozen()

    from wicket.server.dev import run_dev_server

    run_dev_server(
        app,
        args.host or app.config.host,
        args.port or app.config.port,
        reload=app.config.debug,
        app_path=args.app,
    )
