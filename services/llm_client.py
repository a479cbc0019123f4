"""
Chat-completions API client for LLM integration.

Talks to an OpenAI-compatible ``/chat/completions`` endpoint (DeepSeek by
default). Requests are made exactly once; failures are raised as typed
errors carrying whatever detail the upstream returned.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Union

import httpx

from config.settings import LLMSettings


logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from LLM API call."""
    content: str
    model: str
    usage: Dict[str, int] = field(default_factory=dict)
    response_time: float = 0.0


@dataclass
class ChatMessage:
    """Chat message for conversation context."""
    role: str  # 'system', 'user', 'assistant'
    content: str


class LLMServiceError(Exception):
    """Base exception for model API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class UpstreamHTTPError(LLMServiceError):
    """Raised when the API answers with a non-2xx status."""
    pass


class UpstreamTimeoutError(LLMServiceError):
    """Raised when the API does not answer within the timeout."""
    pass


class UpstreamConnectionError(LLMServiceError):
    """Raised when the API cannot be reached."""
    pass


class MalformedResponseError(LLMServiceError):
    """Raised when a 2xx response does not carry a chat completion."""
    pass


def _response_detail(response: httpx.Response) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, ValueError):
        return response.text or None


class ChatCompletionsClient:
    """
    Client for an OpenAI-compatible chat-completions API.

    One HTTP request per call, no retries, bounded by the configured timeout.
    """

    def __init__(self, settings: LLMSettings, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the client.

        Args:
            settings: Model backend settings
            transport: Optional httpx transport (used by tests)
        """
        if not settings.is_configured:
            raise ValueError("Model API key is required")

        self.settings = settings
        self.api_key = settings.api_key
        self.base_url = settings.base_url.rstrip('/')
        self.model = settings.model
        self.timeout = settings.timeout
        self.temperature = settings.temperature

        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json"
            }
        )

        logger.info(f"Chat-completions client initialized with model: {self.model}")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @property
    def completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    async def _make_request(
        self,
        model: str,
        messages: List[Dict[str, str]],
        **kwargs
    ) -> Dict[str, Any]:
        """
        Make one request to the chat-completions endpoint.

        Args:
            model: Model to use for generation
            messages: List of chat messages
            **kwargs: Additional generation parameters

        Returns:
            Dict[str, Any]: Decoded API response

        Raises:
            LLMServiceError: If the request fails for any reason
        """
        payload = {
            "model": model,
            "messages": messages,
            "temperature": kwargs.pop('temperature', self.temperature),
            **kwargs
        }

        try:
            response = await self.client.post(self.completions_url, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"Model request timed out after {self.timeout}s: {e}")
            raise UpstreamTimeoutError(f"Model request timed out after {self.timeout}s") from e
        except httpx.RequestError as e:
            logger.error(f"HTTP request error: {e}")
            raise UpstreamConnectionError(f"Model request failed: {e}") from e

        if not response.is_success:
            detail = _response_detail(response)
            logger.error(f"Model API returned status {response.status_code}: {detail}")
            raise UpstreamHTTPError(
                f"API request failed with status {response.status_code}",
                status_code=response.status_code,
                detail=detail
            )

        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"Failed to decode JSON response: {e}")
            raise MalformedResponseError(
                f"Invalid JSON response: {e}",
                status_code=response.status_code,
                detail=response.text or None
            ) from e

    async def generate_response(
        self,
        messages: Union[List[ChatMessage], List[Dict[str, str]]],
        model: Optional[str] = None,
        **kwargs
    ) -> LLMResponse:
        """
        Generate a response from the LLM.

        Args:
            messages: List of chat messages or message dictionaries
            model: Model to use (defaults to configured model)
            **kwargs: Additional generation parameters

        Returns:
            LLMResponse: Generated response with metadata

        Raises:
            LLMServiceError: If the request fails or the reply is malformed
        """
        start_time = time.time()
        target_model = model or self.model

        message_dicts = [
            {"role": msg.role, "content": msg.content} if isinstance(msg, ChatMessage) else msg
            for msg in messages
        ]

        logger.info(f"Generating response with model: {target_model}")
        response_data = await self._make_request(target_model, message_dicts, **kwargs)

        try:
            content = response_data['choices'][0]['message']['content']
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedResponseError(
                "Response carries no chat completion content",
                detail=response_data
            ) from e

        if content is not None and not isinstance(content, str):
            raise MalformedResponseError("Chat completion content is not text", detail=response_data)

        response_time = time.time() - start_time
        logger.info(f"Response generated successfully in {response_time:.2f}s")

        return LLMResponse(
            content=content or "",
            model=response_data.get('model', target_model),
            usage=response_data.get('usage') or {},
            response_time=response_time
        )
