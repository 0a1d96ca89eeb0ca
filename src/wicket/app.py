"""Wicket application class.

Mutable during setup (routes, error handlers, batch jobs).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import logging
import sys
import threading
from collections.abc import Callable, Sequence
from typing import Any

from wicket._internal.asgi import Receive, Scope, Send
from wicket._internal.types import BatchJob, ErrorHandler, Handler
from wicket.batch import BatchRunner
from wicket.config import AppConfig
from wicket.data.database import Database
from wicket.logs import configure_logging
from wicket.routing.route import Route
from wicket.routing.router import Router
from wicket.server.dispatch import Dispatcher
from wicket.server.handler import handle_request
from wicket.sessions import SessionStore, create_session_store

logger = logging.getLogger("wicket.app")


class App:
    """The wicket application.

    Mutable during setup (route registration, error handlers, jobs).
    Frozen at runtime when ``app.run()`` or ``__call__()`` is first invoked.

    Usage::

        app = App(AppConfig(debug=True))

        @app.get("/hello/:name")
        def hello(ctx, name):
            return f"<h1>Hello, {escape(name)}!</h1>"

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread builds the dispatcher, even when several workers receive
        their first request at once.
    """

    __slots__ = (
        "_batch",
        "_db",
        "_dispatcher",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_router",
        "_sessions",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        sessions: SessionStore | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._router = Router()
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._batch = BatchRunner()
        self._sessions: SessionStore | None = sessions
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Built now, connected on first use
        self._db: Database | None = (
            Database(self.config.db, debug=self.config.debug) if self.config.db else None
        )

        # Compiled state, set during _freeze()
        self._dispatcher: Dispatcher | None = None

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: Sequence[str] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path pattern. Use ``:name`` for a path parameter;
                captured values are passed to the handler positionally.
            methods: HTTP methods. Defaults to ``["GET"]``.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            for method in methods or ["GET"]:
                self._router.add(method, path, func)
            return func

        return decorator

    def get(self, path: str) -> Callable[[Handler], Handler]:
        """Register a ``GET`` route."""
        return self.route(path, methods=["GET"])

    def post(self, path: str) -> Callable[[Handler], Handler]:
        """Register a ``POST`` route."""
        return self.route(path, methods=["POST"])

    def put(self, path: str) -> Callable[[Handler], Handler]:
        """Register a ``PUT`` route."""
        return self.route(path, methods=["PUT"])

    def delete(self, path: str) -> Callable[[Handler], Handler]:
        """Register a ``DELETE`` route."""
        return self.route(path, methods=["DELETE"])

    def patch(self, path: str) -> Callable[[Handler], Handler]:
        """Register a ``PATCH`` route."""
        return self.route(path, methods=["PATCH"])

    @property
    def routes(self) -> tuple[Route, ...]:
        """Registered routes in match-priority order."""
        return self._router.routes

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator.

        ``app.error(404)`` renders unmatched paths, ``app.error(500)``
        renders crashes (and CSRF rejections, unless a 403 or
        ``CSRFError`` handler exists). Handlers take ``()``, ``(ctx)``
        or ``(ctx, exc)``.
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Batch jobs --

    def batch(self, name: str) -> Callable[[BatchJob], BatchJob]:
        """Register a command-line batch job via decorator."""

        def decorator(func: BatchJob) -> BatchJob:
            self._check_not_frozen()
            self._batch.register(name, func)
            return func

        return decorator

    @property
    def batch_jobs(self) -> BatchRunner:
        return self._batch

    def run_batch(self, argv: Sequence[str] | None = None) -> int:
        """Run a batch job from command-line arguments; returns the exit status.

        ``argv`` defaults to ``sys.argv[1:]``; its first item names the
        job, and an empty list prints the available jobs.
        """
        self._ensure_frozen()
        return self._batch.run(sys.argv[1:] if argv is None else argv)

    # -- Logging --

    def log(self, message: str, level: str | int = "INFO") -> None:
        """Write *message* to the app log at *level* (name or number)."""
        if isinstance(level, str):
            levels = logging.getLevelNamesMapping()
            try:
                level = levels[level.upper()]
            except KeyError:
                msg = f"Unknown log level {level!r}. Valid levels: {sorted(levels)}"
                raise ValueError(msg) from None
        logger.log(level, message)

    # -- Database --

    @property
    def db(self) -> Database:
        """The database, if configured. Connects lazily on first query.

        Raises ``RuntimeError`` if no database was configured on this app.

        Usage::

            app = App(AppConfig(db=DatabaseConfig("sqlite:///app.db")))

            @app.get("/users")
            async def users(ctx):
                return await app.db.fetch("SELECT * FROM users")
        """
        if self._db is None:
            msg = (
                "No database configured. Set AppConfig(db=DatabaseConfig(...)) "
                "or use Database directly: from wicket.data import Database"
            )
            raise RuntimeError(msg)
        return self._db

    # -- Server --

    @property
    def dispatcher(self) -> Dispatcher:
        """The compiled request pipeline. Freezes the app."""
        self._ensure_frozen()
        assert self._dispatcher is not None
        return self._dispatcher

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start the development server (requires ``pounce``).

        Freezes the app first, so configuration mistakes surface before
        the server binds.
        """
        self._ensure_frozen()

        from wicket.server.dev import run_dev_server

        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await handle_request(scope, receive, send, dispatcher=self.dispatcher)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup, before the first HTTP request, and
        closes the database connection (if one was opened) at shutdown.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                if self._db is not None:
                    await self._db.close()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # 1. File logging first, so everything below is recorded
        configure_logging(self.config.log_dir, self.config.timezone, debug=self.config.debug)

        # 2. Route table
        self._router.compile()

        # 3. Session store: signed cookies when a secret key is set
        if self._sessions is None:
            self._sessions = create_session_store(self.config)

        # 4. Gate chain (exemption patterns compile here)
        self._dispatcher = Dispatcher.from_config(
            self.config,
            self._router,
            self._error_handlers,
            self._sessions,
        )

        self._frozen = True
        logger.debug("App frozen with %d routes", len(self._router.routes))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, error handlers and batch jobs before calling app.run()."
            )
            raise RuntimeError(msg)
