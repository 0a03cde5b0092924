"""
Unit tests for the chat-completion transport client.
requests.post is patched; no network traffic happens.
"""
import pytest
import requests
from unittest.mock import patch

from contract_scanner.config import Settings
from contract_scanner.services.errors import (
    InvalidEndpointError,
    ResponseShapeError,
    TransportError,
)
from contract_scanner.services.llm_client import LLMClient
from tests.helpers import chat_completion, make_http_response

BASE_URL = "https://llm.example.com/v1/chat/completions"


@pytest.fixture
def client():
    return LLMClient(base_url=BASE_URL, api_key="sk-test", model="test-model")


class TestSendPrompt:
    """Tests for the request/response cycle."""

    def test_returns_message_content(self, client):
        with patch('contract_scanner.services.llm_client.requests.post') as mock_post:
            mock_post.return_value = make_http_response(200, chat_completion("hello"))

            assert client.send_prompt("hi") == "hello"

    def test_request_body_headers_and_timeout(self, client):
        with patch('contract_scanner.services.llm_client.requests.post') as mock_post:
            mock_post.return_value = make_http_response(200, chat_completion("ok"))

            client.send_prompt("analyze this")

            mock_post.assert_called_once()
            args, kwargs = mock_post.call_args
            assert args[0] == BASE_URL
            assert kwargs['json'] == {
                'model': 'test-model',
                'messages': [{'role': 'user', 'content': 'analyze this'}],
                'temperature': 0.7,
                'max_tokens': 4000
            }
            assert kwargs['headers']['Authorization'] == 'Bearer sk-test'
            assert kwargs['headers']['Content-Type'] == 'application/json'
            assert kwargs['timeout'] == 120.0

    def test_one_call_per_prompt_no_retry(self, client):
        """A failing call is not retried."""
        with patch('contract_scanner.services.llm_client.requests.post') as mock_post:
            mock_post.return_value = make_http_response(503, text="busy")

            with pytest.raises(TransportError):
                client.send_prompt("hi")

            assert mock_post.call_count == 1

    def test_from_settings(self):
        settings = Settings(base_url=BASE_URL, api_key="k", model="m", timeout=30, max_tokens=10)
        client = LLMClient.from_settings(settings)

        assert client.base_url == BASE_URL
        assert client.model == "m"
        assert client.timeout == 30
        assert client.max_tokens == 10
        assert client.temperature == 0.7


class TestTransportErrors:
    """Tests for the distinct failure kinds."""

    def test_http_500_carries_status_and_body(self, client):
        with patch('contract_scanner.services.llm_client.requests.post') as mock_post:
            mock_post.return_value = make_http_response(500, text="internal error")

            with pytest.raises(TransportError) as exc_info:
                client.send_prompt("hi")

            assert exc_info.value.status_code == 500
            assert exc_info.value.body == "internal error"
            assert exc_info.value.message == "API error (500): internal error"

    def test_http_201_is_not_success(self, client):
        with patch('contract_scanner.services.llm_client.requests.post') as mock_post:
            mock_post.return_value = make_http_response(201, chat_completion("ok"))

            with pytest.raises(TransportError) as exc_info:
                client.send_prompt("hi")

            assert exc_info.value.status_code == 201

    @pytest.mark.parametrize("url", ["", "not a url", "ftp://llm.example.com/v1", "https://"])
    def test_malformed_endpoint(self, url):
        client = LLMClient(base_url=url, api_key="k")
        with patch('contract_scanner.services.llm_client.requests.post') as mock_post:
            with pytest.raises(InvalidEndpointError) as exc_info:
                client.send_prompt("hi")

            mock_post.assert_not_called()
            assert exc_info.value.message == "Invalid API endpoint"

    def test_requests_invalid_url_maps_to_endpoint_error(self, client):
        with patch('contract_scanner.services.llm_client.requests.post') as mock_post:
            mock_post.side_effect = requests.exceptions.InvalidURL("bad host")

            with pytest.raises(InvalidEndpointError):
                client.send_prompt("hi")

    def test_timeout_is_transport_error(self, client):
        with patch('contract_scanner.services.llm_client.requests.post') as mock_post:
            mock_post.side_effect = requests.exceptions.ReadTimeout("read timed out")

            with pytest.raises(TransportError) as exc_info:
                client.send_prompt("hi")

            assert exc_info.value.status_code is None
            assert "timed out" in exc_info.value.body

    def test_connection_error_is_transport_error(self, client):
        with patch('contract_scanner.services.llm_client.requests.post') as mock_post:
            mock_post.side_effect = requests.exceptions.ConnectionError("refused")

            with pytest.raises(TransportError) as exc_info:
                client.send_prompt("hi")

            assert exc_info.value.status_code is None


class TestResponseShape:
    """Tests for malformed 200 responses."""

    def test_body_not_json(self, client):
        with patch('contract_scanner.services.llm_client.requests.post') as mock_post:
            mock_post.return_value = make_http_response(200, text="<html>gateway</html>")

            with pytest.raises(ResponseShapeError) as exc_info:
                client.send_prompt("hi")

            assert exc_info.value.message == "Invalid response from server"

    @pytest.mark.parametrize("body", [
        {},
        {"choices": []},
        {"choices": "nope"},
        {"choices": [{}]},
        {"choices": [{"message": "text"}]},
        {"choices": [{"message": {"role": "assistant"}}]},
        {"choices": [{"message": {"content": None}}]},
        {"choices": [{"message": {"content": 42}}]},
        ["choices"],
    ])
    def test_missing_content_path(self, client, body):
        with patch('contract_scanner.services.llm_client.requests.post') as mock_post:
            mock_post.return_value = make_http_response(200, body)

            with pytest.raises(ResponseShapeError):
                client.send_prompt("hi")
