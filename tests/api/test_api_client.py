"""Tests for the backend HTTP client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from src.api.client import APIClient, APIError, get_error_message


def _response(status_code: int = 200, json_data=None, reason: str = "OK") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    resp.reason = reason
    resp.content = b"{}" if json_data is not None else b""
    if json_data is None:
        resp.json.side_effect = ValueError("no body")
    else:
        resp.json.return_value = json_data
    return resp


def _client(session: MagicMock, auth=None, **kwargs) -> APIClient:
    return APIClient(
        base_url="http://api.test/api/", auth=auth, session=session, **kwargs
    )


class TestGetErrorMessage:
    def test_string_detail(self):
        assert get_error_message(_response(404, {"detail": "Not found"})) == "Not found"

    def test_validation_detail_list(self):
        resp = _response(422, {"detail": [{"msg": "field required"}, {"msg": "too long"}]})
        assert get_error_message(resp) == "field required, too long"

    def test_fallback(self):
        resp = _response(500, None, reason="Internal Server Error")
        assert get_error_message(resp) == "HTTP 500: Internal Server Error"


class TestRequest:
    def test_get_builds_url_and_drops_none_params(self):
        session = MagicMock()
        session.request.return_value = _response(200, {"ok": True})
        client = _client(session)

        assert client.get("/v1/blog/posts", params={"page": 1, "search": None}) == {"ok": True}

        args, kwargs = session.request.call_args
        assert args == ("GET", "http://api.test/api/v1/blog/posts")
        assert kwargs["params"] == {"page": 1}
        assert kwargs["headers"] == {}

    def test_bearer_token_attached(self):
        session = MagicMock()
        session.request.return_value = _response(200, {})
        auth = MagicMock()
        auth.get_access_token.return_value = "tok"

        _client(session, auth=auth).get("/x")

        assert session.request.call_args.kwargs["headers"] == {"Authorization": "Bearer tok"}

    def test_token_failure_sends_without_header(self):
        session = MagicMock()
        session.request.return_value = _response(200, {})
        auth = MagicMock()
        auth.get_access_token.side_effect = RuntimeError("no session")

        _client(session, auth=auth).get("/x")

        assert session.request.call_args.kwargs["headers"] == {}

    def test_empty_body_returns_none(self):
        session = MagicMock()
        session.request.return_value = _response(204, None)
        assert _client(session).delete("/x") is None

    def test_error_status_raises(self):
        session = MagicMock()
        session.request.return_value = _response(404, {"detail": "Post not found"})

        with pytest.raises(APIError) as exc_info:
            _client(session).get("/x")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Post not found"

    def test_refresh_and_retry_once_on_401(self):
        session = MagicMock()
        session.request.side_effect = [_response(401, {"detail": "expired"}), _response(200, {"ok": 1})]
        auth = MagicMock()
        auth.get_access_token.return_value = "tok"
        auth.refresh_session.return_value = object()

        assert _client(session, auth=auth).get("/x") == {"ok": 1}
        auth.refresh_session.assert_called_once()
        assert session.request.call_count == 2

    def test_second_401_raises(self):
        session = MagicMock()
        session.request.return_value = _response(401, {"detail": "expired"})
        auth = MagicMock()
        auth.refresh_session.return_value = object()

        with pytest.raises(APIError) as exc_info:
            _client(session, auth=auth).get("/x")

        assert exc_info.value.status_code == 401
        assert session.request.call_count == 2

    def test_timeout_not_retried(self):
        session = MagicMock()
        session.request.side_effect = requests.Timeout("slow")

        with pytest.raises(APIError, match="timed out"):
            _client(session).get("/x")
        assert session.request.call_count == 1

    @patch("src.api.client.time.sleep")
    def test_connection_errors_retried_with_backoff(self, mock_sleep):
        session = MagicMock()
        session.request.side_effect = [
            requests.ConnectionError("down"),
            requests.ConnectionError("down"),
            _response(200, {"ok": True}),
        ]

        assert _client(session, max_retries=3).get("/x") == {"ok": True}
        assert [c.args[0] for c in mock_sleep.call_args_list] == [2.0, 4.0]

    @patch("src.api.client.time.sleep")
    def test_connection_retries_exhausted(self, mock_sleep):
        session = MagicMock()
        session.request.side_effect = requests.ConnectionError("down")

        with pytest.raises(APIError, match="Connection failed"):
            _client(session, max_retries=2).get("/x")
        assert session.request.call_count == 3


def test_context_manager_closes_session():
    session = MagicMock()
    with _client(session):
        pass
    session.close.assert_called_once()
