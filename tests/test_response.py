"""Tests for wicket.http.response and wicket.server.negotiation."""

import pytest

from wicket.http.cookies import SetCookie, parse_cookies
from wicket.http.response import (
    JSON_CONTENT_TYPE,
    Redirect,
    Response,
    error_response,
    escape,
    json_response,
)
from wicket.server.negotiation import negotiate
from wicket.server.sender import encode_headers, send_response


class TestResponse:
    def test_defaults(self) -> None:
        response = Response()
        assert response.status == 200
        assert response.content_type.startswith("text/html")
        assert response.headers == ()

    def test_transformations_return_new_objects(self) -> None:
        original = Response(body="hi")
        changed = original.with_status(201).with_header("X-A", "1").with_headers({"X-B": "2"})
        assert original.status == 200
        assert original.headers == ()
        assert changed.status == 201
        assert changed.headers == (("X-A", "1"), ("X-B", "2"))

    def test_with_content_type(self) -> None:
        assert Response(body="x").with_content_type("text/plain").content_type == "text/plain"

    def test_header_lookup_is_case_insensitive(self) -> None:
        response = Response().with_headers([("X-Frame-Options", "SAMEORIGIN")])
        assert response.header("x-frame-options") == "SAMEORIGIN"
        assert response.header("missing") is None

    def test_text_and_bytes(self) -> None:
        assert Response(body=b"abc").text == "abc"
        assert Response(body="abc").body_bytes == b"abc"

    def test_json_helpers(self) -> None:
        response = json_response({"ok": True}, status=202)
        assert response.status == 202
        assert response.content_type == JSON_CONTENT_TYPE
        assert response.json == {"ok": True}
        assert error_response("Unauthorized", 401).json == {"error": "Unauthorized"}

    def test_escape(self) -> None:
        assert escape('<script>"x"</script>') == "&lt;script&gt;&quot;x&quot;&lt;/script&gt;"


class TestCookies:
    def test_parse(self) -> None:
        assert parse_cookies("a=1; b = 2; junk; a=3") == {"a": "1", "b": "2"}

    def test_set_cookie_header(self) -> None:
        cookie = SetCookie("sid", "abc", max_age=60)
        assert cookie.to_header_value() == "sid=abc; Max-Age=60; Path=/; HttpOnly; SameSite=Lax"


class TestNegotiate:
    def test_passthrough(self) -> None:
        response = Response(body="x", status=204)
        assert negotiate(response) is response

    def test_redirect(self) -> None:
        response = negotiate(Redirect("/login"))
        assert response.status == 302
        assert response.header("Location") == "/login"

    def test_none(self) -> None:
        assert negotiate(None).body == ""

    def test_bytes(self) -> None:
        assert negotiate(b"\x00").content_type == "application/octet-stream"

    def test_list_is_json(self) -> None:
        assert negotiate([1, 2]).json == [1, 2]

    def test_status_tuple(self) -> None:
        assert negotiate(("gone", 410)).status == 410

    def test_unsupported(self) -> None:
        with pytest.raises(TypeError, match="Cannot convert int"):
            negotiate(42)


class TestSender:
    def test_encode_headers(self) -> None:
        response = (
            Response(body="hé")
            .with_header("X-Frame-Options", "DENY")
            .with_cookie(SetCookie("sid", "abc"))
        )
        raw = encode_headers(response)
        assert (b"x-frame-options", b"DENY") in raw
        assert (b"content-length", b"3") in raw
        assert any(name == b"set-cookie" for name, _ in raw)

    async def test_head_sends_no_body(self) -> None:
        messages: list[dict] = []

        async def send(message: dict) -> None:
            messages.append(message)

        await send_response(Response(body="hello"), send, head=True)
        assert messages[0]["status"] == 200
        assert (b"content-length", b"5") in messages[0]["headers"]
        assert messages[1]["body"] == b""

    async def test_no_body_for_304(self) -> None:
        messages: list[dict] = []

        async def send(message: dict) -> None:
            messages.append(message)

        await send_response(Response(body="stale", status=304), send)
        assert messages[1]["body"] == b""
