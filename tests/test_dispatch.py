"""Tests for wicket.server.dispatch — the full request pipeline."""

import logging
from pathlib import Path

import pytest

from wicket.app import App
from wicket.config import AppConfig, BearerConfig, CORSConfig, SecurityConfig
from wicket.context import DispatchState, RequestContext
from wicket.errors import CSRFError, HTTPError
from wicket.gates import MAINTENANCE_BODY
from wicket.http.headers import Headers
from wicket.http.request import Request
from wicket.http.response import Redirect, Response
from wicket.server.errors import INTERNAL_ERROR_BODY, NOT_FOUND_BODY
from wicket.testing import TestClient


def _config(tmp_path: Path, **overrides: object) -> AppConfig:
    """A config whose maintenance sentinel lives in *tmp_path*."""
    options: dict[str, object] = {"maintenance_file": tmp_path / ".maintenance"}
    options.update(overrides)
    return AppConfig(**options)  # type: ignore[arg-type]


def _ctx(app: App, method: str = "GET", path: str = "/") -> RequestContext:
    dispatcher = app.dispatcher
    request = Request(method=method, path=path, headers=Headers())
    return RequestContext(request, dispatcher.sessions, csrf=dispatcher.csrf)


class TestDispatchStates:
    async def test_handled(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.get("/")
        def index(ctx):
            return "ok"

        ctx = _ctx(app)
        response = await app.dispatcher.handle(ctx)
        assert response.status == 200
        assert ctx.state is DispatchState.HANDLED

    async def test_not_found(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))
        ctx = _ctx(app, path="/missing")
        response = await app.dispatcher.handle(ctx)
        assert response.status == 404
        assert ctx.state is DispatchState.NOT_FOUND

    async def test_fault(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.get("/boom")
        def boom(ctx):
            raise RuntimeError("boom")

        ctx = _ctx(app, path="/boom")
        response = await app.dispatcher.handle(ctx)
        assert response.status == 500
        assert ctx.state is DispatchState.ERROR_HANDLED

    async def test_gate_short_circuit(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.post("/form")
        def submit(ctx):
            return "never"

        ctx = _ctx(app, "POST", "/form")
        response = await app.dispatcher.handle(ctx)
        assert response.status == 403
        assert ctx.state is DispatchState.HANDLED

    async def test_handler_sees_routed_state_and_params(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))
        seen: list[tuple[DispatchState, tuple[str, ...]]] = []

        @app.get("/hello/:name")
        def hello(ctx, name):
            seen.append((ctx.state, ctx.params))
            return name

        await app.dispatcher.handle(_ctx(app, path="/hello/World"))
        assert seen == [(DispatchState.ROUTED, ("World",))]


class TestPipelineOrder:
    async def test_security_headers_on_every_response(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.get("/")
        def index(ctx):
            return "ok"

        async with TestClient(app) as client:
            for path in ("/", "/missing"):
                response = await client.get(path)
                assert response.header("x-content-type-options") == "nosniff"
                assert response.header("x-frame-options") == "SAMEORIGIN"
                assert response.header("x-xss-protection") == "1; mode=block"

    async def test_security_headers_can_be_disabled(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path, security=SecurityConfig(headers_enabled=False)))
        async with TestClient(app) as client:
            response = await client.get("/missing")
            assert response.header("x-frame-options") is None

    async def test_maintenance_wins_over_everything(self, tmp_path: Path) -> None:
        (tmp_path / ".maintenance").touch()
        app = App(
            _config(
                tmp_path,
                security=SecurityConfig(bearer=BearerConfig(enabled=True, tokens=("t",))),
            )
        )

        @app.post("/form")
        def submit(ctx):
            return "never"

        async with TestClient(app) as client:
            response = await client.post("/form", form={"message": "hi"})
            assert response.status == 503
            assert response.text == MAINTENANCE_BODY
            assert response.header("x-frame-options") is None
            assert response.header("set-cookie") is None

    async def test_bearer_rejection_carries_cors_and_security_headers(
        self, tmp_path: Path
    ) -> None:
        app = App(
            _config(
                tmp_path,
                security=SecurityConfig(
                    cors=CORSConfig(enabled=True, allowed_origins=("*",)),
                    bearer=BearerConfig(enabled=True, tokens=("t",)),
                ),
            )
        )
        async with TestClient(app) as client:
            response = await client.get("/private", headers={"Origin": "https://a.example"})
            assert response.status == 401
            assert response.header("access-control-allow-origin") == "https://a.example"
            assert response.header("x-content-type-options") == "nosniff"

    async def test_preflight_answered_before_bearer(self, tmp_path: Path) -> None:
        app = App(
            _config(
                tmp_path,
                security=SecurityConfig(
                    cors=CORSConfig(enabled=True, allowed_origins=("*",)),
                    bearer=BearerConfig(enabled=True, tokens=("t",)),
                ),
            )
        )
        async with TestClient(app) as client:
            response = await client.options("/private", headers={"Origin": "https://a.example"})
            assert response.status == 200
            assert response.body == b""

    async def test_bearer_token_skips_csrf(self, tmp_path: Path) -> None:
        app = App(
            _config(
                tmp_path,
                security=SecurityConfig(bearer=BearerConfig(enabled=True, tokens=("t",))),
            )
        )

        @app.post("/api/private")
        def private(ctx):
            return {"authenticated": ctx.bearer_authenticated}

        async with TestClient(app) as client:
            response = await client.post(
                "/api/private", headers={"Authorization": "Bearer t"}, json={}
            )
            assert response.status == 200
            assert response.json == {"authenticated": True}


class TestNotFound:
    async def test_default_body(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        app = App(_config(tmp_path))
        caplog.set_level(logging.WARNING, logger="wicket")
        async with TestClient(app) as client:
            response = await client.get("/missing")
        assert response.status == 404
        assert response.text == NOT_FOUND_BODY
        assert "404 Not Found: GET /missing" in caplog.text

    async def test_custom_handler(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.error(404)
        def not_found(ctx):
            return f"Nothing at {ctx.path}"

        async with TestClient(app) as client:
            response = await client.get("/nowhere")
            assert response.status == 404
            assert response.text == "Nothing at /nowhere"

    async def test_head_is_not_routed(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.get("/")
        def index(ctx):
            return "ok"

        async with TestClient(app) as client:
            response = await client.request("HEAD", "/")
            assert response.status == 404
            assert response.body == b""


class TestFaults:
    async def test_default_500(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        app = App(_config(tmp_path))

        @app.get("/boom")
        def boom(ctx):
            raise RuntimeError("kaboom")

        caplog.set_level(logging.ERROR, logger="wicket")
        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert response.text == INTERNAL_ERROR_BODY
        assert "Uncaught Exception: kaboom in" in caplog.text
        assert response.header("x-frame-options") == "SAMEORIGIN"

    async def test_debug_page(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path, debug=True))

        @app.get("/boom")
        def boom(ctx):
            raise ValueError("<bad>")

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert "ValueError" in response.text
        assert "&lt;bad&gt;" in response.text
        assert "<bad>" not in response.text

    async def test_custom_500_handler(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.get("/boom")
        def boom(ctx):
            raise RuntimeError("kaboom")

        @app.error(500)
        def crashed(ctx, exc):
            return f"Sorry: {exc}"

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert response.text == "Sorry: kaboom"

    async def test_failing_error_handler_falls_back(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        app = App(_config(tmp_path))

        @app.get("/boom")
        def boom(ctx):
            raise RuntimeError("kaboom")

        @app.error(500)
        def crashed():
            raise LookupError("handler broke")

        caplog.set_level(logging.ERROR, logger="wicket")
        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert response.text == INTERNAL_ERROR_BODY
        assert "Error handler failed: handler broke" in caplog.text

    async def test_handler_by_exception_type(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.get("/boom")
        def boom(ctx):
            raise KeyError("missing")

        @app.error(KeyError)
        def key_error():
            return ("no such key", 400)

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 400
        assert response.text == "no such key"

    async def test_bad_return_value_is_a_fault(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.get("/")
        def index(ctx):
            return 42

        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 500


class TestHTTPErrors:
    async def test_raised_http_error(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.get("/teapot")
        def teapot(ctx):
            raise HTTPError(status=418, detail="I'm a teapot", headers=(("X-Brew", "no"),))

        async with TestClient(app) as client:
            response = await client.get("/teapot")
        assert response.status == 418
        assert response.json == {"error": "I'm a teapot"}
        assert response.header("x-brew") == "no"


class TestCSRFRejectionRendering:
    async def test_500_handler_renders_csrf_rejection(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.post("/form")
        def submit(ctx):
            return "never"

        @app.error(500)
        def error_page(ctx, exc):
            return f"<h1>{exc.detail}</h1>"

        async with TestClient(app) as client:
            response = await client.post("/form", form={"message": "hi"})
        assert response.status == 403
        assert response.text == "<h1>CSRF Validation Failed</h1>"

    async def test_csrf_error_handler_preferred(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.error(500)
        def error_page():
            return "generic"

        @app.error(CSRFError)
        def csrf_page():
            return Response(body="csrf", status=400)

        async with TestClient(app) as client:
            response = await client.post("/anything", form={})
        assert response.status == 403
        assert response.text == "csrf"


class TestNegotiation:
    async def test_return_types(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.get("/html")
        def html(ctx):
            return "<p>hi</p>"

        @app.get("/json")
        def json(ctx):
            return {"ok": True}

        @app.get("/tuple")
        def created(ctx):
            return ("made", 201, {"X-Id": "7"})

        async with TestClient(app) as client:
            html_response = await client.get("/html")
            assert html_response.content_type.startswith("text/html")
            json_response = await client.get("/json")
            assert json_response.content_type == "application/json"
            assert json_response.json == {"ok": True}
            tuple_response = await client.get("/tuple")
            assert tuple_response.status == 201
            assert tuple_response.header("x-id") == "7"

    async def test_async_handler_and_trailing_slash(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.get("/form")
        async def form(ctx):
            return "async ok"

        async with TestClient(app) as client:
            response = await client.get("/form/")
        assert response.status == 200
        assert response.text == "async ok"


class TestMalformedBodies:
    MULTIPART = {"content-type": "multipart/form-data"}

    async def test_bearer_rejects_before_body_is_parsed(self, tmp_path: Path) -> None:
        app = App(
            _config(
                tmp_path,
                security=SecurityConfig(bearer=BearerConfig(enabled=True, tokens=("t",))),
            )
        )

        @app.post("/api/private")
        def private(ctx):
            return "never"

        async with TestClient(app) as client:
            response = await client.post("/api/private", headers=self.MULTIPART, body=b"x")
        assert response.status == 401
        assert response.header("x-content-type-options") == "nosniff"

    async def test_csrf_rejects_unparseable_form(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.post("/form")
        def submit(ctx):
            return "never"

        async with TestClient(app) as client:
            response = await client.post("/form", headers=self.MULTIPART, body=b"x")
        assert response.status == 403
        assert response.header("x-content-type-options") == "nosniff"

    async def test_routed_request_with_unparseable_form_is_400(self, tmp_path: Path) -> None:
        app = App(
            _config(
                tmp_path,
                security=SecurityConfig(bearer=BearerConfig(enabled=True, tokens=("t",))),
            )
        )

        @app.post("/api/private")
        def private(ctx):
            return "never"

        headers = {**self.MULTIPART, "authorization": "Bearer t"}
        async with TestClient(app) as client:
            response = await client.post("/api/private", headers=headers, body=b"x")
        assert response.status == 400
        assert response.json["error"].startswith("Malformed form body")
        assert response.header("x-content-type-options") == "nosniff"


class TestHeaderEncoding:
    async def test_redirect_location_is_percent_encoded(self, tmp_path: Path) -> None:
        app = App(_config(tmp_path))

        @app.get("/go")
        def go(ctx):
            return Redirect("/日本?q=a b")

        async with TestClient(app) as client:
            response = await client.get("/go")
        assert response.status == 302
        assert response.header("location") == "/%E6%97%A5%E6%9C%AC?q=a%20b"

    async def test_unencodable_header_is_logged_500(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        app = App(_config(tmp_path))

        @app.get("/arrow")
        def arrow(ctx):
            return ("x", 200, {"X-Name": "→"})

        with caplog.at_level(logging.ERROR, logger="wicket"):
            async with TestClient(app) as client:
                response = await client.get("/arrow")
        assert response.status == 500
        assert response.text == INTERNAL_ERROR_BODY
        assert "Uncaught Exception" in caplog.text

    async def test_unencodable_error_handler_response_falls_back(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        app = App(_config(tmp_path))

        @app.error(404)
        def missing():
            return ("gone", 404, {"X-Name": "→"})

        with caplog.at_level(logging.ERROR, logger="wicket"):
            async with TestClient(app) as client:
                response = await client.get("/missing")
        assert response.status == 404
        assert response.text == NOT_FOUND_BODY
        assert "Error handler failed" in caplog.text


class TestMaintenanceLogging:
    async def test_maintenance_logs_nothing(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        (tmp_path / ".maintenance").touch()
        app = App(_config(tmp_path))
        caplog.set_level(logging.DEBUG, logger="wicket")

        ctx = _ctx(app, path="/anything")
        response = await app.dispatcher.handle(ctx)
        assert response.status == 503
        assert ctx.state is DispatchState.HANDLED
        assert [r for r in caplog.records if r.name.startswith("wicket")] == []
