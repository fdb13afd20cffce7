"""Tests for src/adapter/response.py — ResponseEvent -> HTTP response."""

import base64
import json

import pytest

from src.adapter.errors import EngineError
from src.adapter.response import DEFAULT_BINARY_CONTENT_TYPE, build_http_response
from src.events.models import ResponseEvent


class TestBuildHttpResponse:

    def test_status_and_headers(self):
        event = ResponseEvent(statusCode=418, headers={"X-One": "1", "X-Two": 2}, body="teapot")
        response = build_http_response(event)
        assert response.status_code == 418
        assert response.headers["x-one"] == "1"
        assert response.headers["x-two"] == "2"
        assert response.body == b"teapot"

    def test_string_body_written_as_is(self):
        body = '{"text": "hello"}'
        event = ResponseEvent(headers={"Content-Type": "application/json"}, body=body)
        response = build_http_response(event)
        assert response.body == body.encode()
        assert response.headers["content-type"] == "application/json"

    def test_structured_body_serialized(self):
        response = build_http_response(ResponseEvent(statusCode=201, body={"text": "hello"}))
        assert response.status_code == 201
        assert json.loads(response.body) == {"text": "hello"}
        assert response.headers["content-type"] == "application/json"

    def test_empty_body(self):
        response = build_http_response(ResponseEvent(statusCode=204))
        assert response.body == b""

    def test_base64_body_decoded_verbatim(self):
        raw = bytes(range(256))
        event = ResponseEvent(
            headers={"content-type": "application/pdf"},
            body=base64.b64encode(raw).decode(),
            isBase64Encoded=True,
        )
        response = build_http_response(event)
        assert response.body == raw
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-length"] == "256"

    def test_base64_default_content_type(self):
        event = ResponseEvent(body=base64.b64encode(b"abc").decode(), isBase64Encoded=True)
        response = build_http_response(event)
        assert response.headers["content-type"] == DEFAULT_BINARY_CONTENT_TYPE

    def test_base64_content_type_lookup_case_insensitive(self):
        event = ResponseEvent(
            headers={"CONTENT-TYPE": "image/png"},
            body=base64.b64encode(b"png").decode(),
            isBase64Encoded=True,
        )
        response = build_http_response(event)
        assert response.headers.getlist("content-type") == ["image/png"]

    def test_event_not_mutated(self):
        headers = {"X-A": "1"}
        event = ResponseEvent(headers=headers, body={"k": "v"})
        build_http_response(event)
        assert event.headers == {"X-A": "1"}
        assert event.body == {"k": "v"}

    def test_none_header_dropped(self):
        event = ResponseEvent(headers={"X-Keep": "1", "X-Drop": None}, body="ok")
        response = build_http_response(event)
        assert response.headers["x-keep"] == "1"
        assert "x-drop" not in response.headers

    def test_none_content_type_gets_binary_default(self):
        event = ResponseEvent(
            headers={"Content-Type": None},
            body=base64.b64encode(b"abc").decode(),
            isBase64Encoded=True,
        )
        response = build_http_response(event)
        assert response.headers["content-type"] == DEFAULT_BINARY_CONTENT_TYPE


class TestUnwritableBodies:

    @pytest.mark.parametrize("body", ["abc", "not base64!", {"k": "v"}])
    def test_bad_base64_is_engine_error(self, body):
        event = ResponseEvent(body=body, isBase64Encoded=True)
        with pytest.raises(EngineError):
            build_http_response(event)

    def test_unserializable_structured_body_is_engine_error(self):
        event = ResponseEvent(body={"when": object()})
        with pytest.raises(EngineError) as exc_info:
            build_http_response(event)
        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_nan_is_engine_error(self):
        with pytest.raises(EngineError):
            build_http_response(ResponseEvent(body={"value": float("nan")}))
