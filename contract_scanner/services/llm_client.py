"""
HTTP client for an OpenAI-compatible chat-completion endpoint.

Posts directly with requests rather than the openai SDK: the configured URL is
the full chat-completions endpoint, and callers need the raw status code and
body of a failed call.
"""
import logging
import time
from urllib.parse import urlparse

import requests

from contract_scanner.config import Settings
from contract_scanner.services.errors import (
    InvalidEndpointError,
    ResponseShapeError,
    TransportError,
)

logger = logging.getLogger(__name__)


def _is_valid_endpoint(url: str) -> bool:
    """Check that the base URL is an absolute http(s) URL with a host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def _extract_content(payload) -> str:
    """
    Pull choices[0].message.content out of a chat-completion envelope.

    Raises:
        ResponseShapeError: If any step of the path is missing or mistyped.
    """
    if not isinstance(payload, dict):
        raise ResponseShapeError()

    choices = payload.get('choices')
    if not isinstance(choices, list) or not choices:
        raise ResponseShapeError()

    first_choice = choices[0]
    if not isinstance(first_choice, dict):
        raise ResponseShapeError()

    message = first_choice.get('message')
    if not isinstance(message, dict):
        raise ResponseShapeError()

    content = message.get('content')
    if not isinstance(content, str):
        raise ResponseShapeError()

    return content


class LLMClient:
    """
    Stateless chat-completion client. One send_prompt() call is exactly one
    POST; there is no retry and no shared connection state, so a single
    instance can be used from several threads at once.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str = "qwen-plus",
        timeout: float = 120.0,
        temperature: float = 0.7,
        max_tokens: int = 4000
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> 'LLMClient':
        return cls(
            base_url=settings.base_url,
            api_key=settings.api_key,
            model=settings.model,
            timeout=settings.timeout,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens
        )

    def _headers(self) -> dict:
        return {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {self.api_key}'
        }

    def _body(self, prompt: str) -> dict:
        return {
            'model': self.model,
            'messages': [
                {
                    'role': 'user',
                    'content': prompt
                }
            ],
            'temperature': self.temperature,
            'max_tokens': self.max_tokens
        }

    def send_prompt(self, prompt: str) -> str:
        """
        Send a single user prompt and return the assistant's text.

        Args:
            prompt: Prompt text.

        Returns:
            The content of choices[0].message.content.

        Raises:
            InvalidEndpointError: If the base URL is malformed.
            TransportError: On a non-200 status, timeout or connection failure.
            ResponseShapeError: If the body is not JSON or lacks the content path.
        """
        if not _is_valid_endpoint(self.base_url):
            logger.error(f"Invalid AI endpoint configured: {self.base_url!r}")
            raise InvalidEndpointError()

        start_time = time.time()
        logger.info(f"Sending prompt to {self.model}: {len(prompt)} chars")

        try:
            response = requests.post(
                self.base_url,
                json=self._body(prompt),
                headers=self._headers(),
                timeout=self.timeout
            )
        except (requests.exceptions.InvalidURL,
                requests.exceptions.MissingSchema,
                requests.exceptions.InvalidSchema):
            logger.error(f"Request rejected AI endpoint: {self.base_url!r}")
            raise InvalidEndpointError()
        except requests.exceptions.Timeout:
            logger.error(f"AI request timed out after {self.timeout}s")
            raise TransportError(None, f"request timed out after {self.timeout:g}s")
        except requests.exceptions.RequestException as e:
            logger.error(f"AI request failed: {type(e).__name__} - {e}")
            raise TransportError(None, str(e))

        duration = time.time() - start_time

        if response.status_code != 200:
            logger.error(
                f"AI request returned {response.status_code} after {duration:.2f}s: "
                f"{response.text[:500]}"
            )
            raise TransportError(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError:
            logger.error("AI response body is not valid JSON")
            raise ResponseShapeError()

        content = _extract_content(payload)
        logger.info(f"AI response received: {len(content)} chars in {duration:.2f}s")
        return content
