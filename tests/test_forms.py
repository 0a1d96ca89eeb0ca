"""Tests for wicket.http.forms — URL-encoded and multipart parsing."""

import pytest

from wicket.http.forms import is_form_content_type, media_type, parse_form_data


class TestContentTypes:
    def test_media_type(self) -> None:
        assert media_type("Multipart/Form-Data; boundary=x") == "multipart/form-data"
        assert media_type(None) == ""

    def test_is_form(self) -> None:
        assert is_form_content_type("application/x-www-form-urlencoded; charset=utf-8")
        assert not is_form_content_type("application/json")


class TestUrlencoded:
    def test_blank_values_kept(self) -> None:
        form = parse_form_data(b"a=&b=2", "application/x-www-form-urlencoded")
        assert form["a"] == ""
        assert form["b"] == "2"
        assert form.files == {}

    def test_unsupported_type(self) -> None:
        with pytest.raises(ValueError, match="Unsupported form content type"):
            parse_form_data(b"", "text/plain")


class TestMultipart:
    def test_fields_and_files(self) -> None:
        body = (
            b"--XyZ\r\n"
            b'Content-Disposition: form-data; name="message"\r\n\r\n'
            b"hello\r\n"
            b"--XyZ\r\n"
            b'Content-Disposition: form-data; name="avatar"; filename="me.png"\r\n'
            b"Content-Type: image/png\r\n\r\n"
            b"\x89PNG\r\n"
            b"--XyZ--\r\n"
        )
        form = parse_form_data(body, "multipart/form-data; boundary=XyZ")
        assert form["message"] == "hello"
        avatar = form.files["avatar"]
        assert avatar.filename == "me.png"
        assert avatar.content_type == "image/png"
        assert avatar.content == b"\x89PNG"
        assert avatar.size == 4

    def test_missing_boundary(self) -> None:
        with pytest.raises(ValueError, match="missing boundary"):
            parse_form_data(b"", "multipart/form-data")
