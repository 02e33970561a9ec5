"""
LLM provider abstraction and response parsing utilities.

Provides a provider interface for generative-analysis calls with bounded,
cancellable retries on rate limiting, plus helpers for navigating the
response envelope and pulling a JSON object out of model output.
"""

import os
import re
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Optional, TypeVar

import requests
from dotenv import load_dotenv
from loguru import logger

load_dotenv()

# Retry configuration
MAX_ATTEMPTS = 3
BASE_DELAY = 2.0

REQUEST_TIMEOUT_S = float(os.getenv("GEMINI_REQUEST_TIMEOUT_S", "120"))
DEFAULT_GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"

T = TypeVar("T")


# --- Errors ---


class UpstreamError(Exception):
    """Base class for failures talking to the generative-analysis API."""


class UpstreamRateLimited(UpstreamError):
    """The API rejected the request as rate limited (HTTP 429)."""

    def __init__(self, message: str, status_code: int = 429):
        self.status_code = status_code
        super().__init__(message)


class UpstreamUnavailable(UpstreamError):
    """Transport failure or any non-429 HTTP error. Never retried."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class MalformedUpstreamResponse(UpstreamError):
    """The response envelope or the model's JSON payload has the wrong shape."""

    def __init__(self, message: str, raw: str = ""):
        self.raw = raw
        super().__init__(message)


class RetriesExhausted(UpstreamError):
    """Every attempt was rate limited."""

    def __init__(self, attempts: int, last_error: Optional[Exception]):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")


class RetryInterrupted(UpstreamError):
    """The request was cancelled while waiting to retry."""

    def __init__(self, attempts: int, last_error: Optional[Exception] = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Cancelled after {attempts} attempts")


# --- Retry loop ---


def _retry_with_backoff(
    operation: Callable[[], T],
    retryable_exception: type[Exception],
    error_message: str,
    max_attempts: int = MAX_ATTEMPTS,
    base_delay: float = BASE_DELAY,
    cancel_event: Optional[threading.Event] = None,
) -> T:
    """
    Execute operation with linear backoff retry on a specific exception.

    The wait between attempts is ``base_delay * attempt`` and blocks on
    ``cancel_event``, so setting the event aborts the remaining attempts.
    Exceptions other than ``retryable_exception`` propagate immediately.

    Args:
        operation: Callable that performs the API request and returns result
        retryable_exception: Exception type that triggers retry
        error_message: Message prefix for retry logging (e.g., "Rate limit hit")
        max_attempts: Total number of attempts including the first
        base_delay: Seconds multiplied by the attempt number between attempts
        cancel_event: Event that interrupts the wait when set

    Raises:
        RetriesExhausted: If every attempt raised retryable_exception
        RetryInterrupted: If cancel_event was set before or between attempts
    """
    if cancel_event is None:
        cancel_event = threading.Event()

    attempt = 0
    last_error: Optional[Exception] = None

    while attempt < max_attempts:
        if cancel_event.is_set():
            raise RetryInterrupted(attempt, last_error)

        attempt += 1
        try:
            return operation()
        except retryable_exception as e:
            last_error = e
            if attempt == max_attempts:
                break

            delay = base_delay * attempt
            logger.warning(
                f"{error_message}, retrying in {delay:.1f}s... (attempt {attempt}/{max_attempts})"
            )
            if cancel_event.wait(delay):
                raise RetryInterrupted(attempt, last_error) from e

    logger.error(f"{error_message}, giving up after {attempt} attempts")
    raise RetriesExhausted(attempt, last_error) from last_error


# --- LLM Provider Classes ---


@dataclass
class LLMResponse:
    """Response from an LLM provider."""

    content: str
    model: str
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None


class LLMProvider(ABC):
    """
    Abstract base for LLM providers.

    Subclasses must:
    - Set _provider_prefix class attribute (e.g., "gemini")
    - Set _retryable_exception to the exception type that triggers retry
    - Set _retry_message for logging during retries
    - Implement _call_api() for the actual API call
    - Implement _extract_response() to turn the raw envelope into an LLMResponse
    - Call update_model(model) in __init__ to set model and name
    """

    _provider_prefix: str
    _retryable_exception: type[Exception] = UpstreamRateLimited
    _retry_message: str = "Rate limit hit"

    max_attempts: int = MAX_ATTEMPTS
    base_delay: float = BASE_DELAY

    name: str
    model: str

    def update_model(self, model: str):
        """Update the model and refresh the provider name."""
        self.model = model
        self.name = f"{self._provider_prefix}/{model}"

    @abstractmethod
    def _call_api(self, prompt: str) -> Any:
        """Make a single API call (no retries). Implemented by subclasses."""
        pass

    @abstractmethod
    def _extract_response(self, envelope: Any) -> LLMResponse:
        """Navigate the provider's response envelope. Implemented by subclasses."""
        pass

    def request(self, prompt: str, cancel_event: Optional[threading.Event] = None) -> Any:
        """Submit the prompt and return the raw response envelope, retrying on rate limits."""
        return _retry_with_backoff(
            partial(self._call_api, prompt),
            self._retryable_exception,
            self._retry_message,
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            cancel_event=cancel_event,
        )

    def generate(self, prompt: str, cancel_event: Optional[threading.Event] = None) -> LLMResponse:
        """Generate a response from the LLM with automatic retry on rate limiting."""
        return self._extract_response(self.request(prompt, cancel_event=cancel_event))


def build_request_body(prompt: str) -> dict:
    """Request body for a single-turn generateContent call."""
    return {"contents": [{"parts": [{"text": prompt}]}]}


def extract_content(envelope: Any) -> str:
    """
    Get the model's text from a generateContent response envelope.

    Args:
        envelope: Decoded JSON response

    Returns:
        The text at candidates[0].content.parts[0].text

    Raises:
        MalformedUpstreamResponse: If any path segment is missing or not text
    """
    try:
        text = envelope["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedUpstreamResponse(
            f"Response envelope has no candidates[0].content.parts[0].text ({e!r})",
            raw=snippet(envelope),
        ) from e

    if not isinstance(text, str):
        raise MalformedUpstreamResponse(
            f"Expected text at candidates[0].content.parts[0].text, got {type(text).__name__}",
            raw=snippet(envelope),
        )
    return text


def snippet(value: Any, limit: int = 500) -> str:
    text = value if isinstance(value, str) else repr(value)
    return text[:limit] + "..." if len(text) > limit else text


class GeminiProvider(LLMProvider):
    """Google Gemini generateContent provider with linear backoff on HTTP 429."""

    _provider_prefix = "gemini"
    _retry_message = "Rate limit hit"

    def __init__(
        self,
        model: str = DEFAULT_GEMINI_MODEL,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        max_attempts: int = MAX_ATTEMPTS,
        base_delay: float = BASE_DELAY,
        timeout: float = REQUEST_TIMEOUT_S,
    ):
        api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise ValueError("GEMINI_API_KEY environment variable not set")

        self.api_key = api_key
        self.update_model(model)
        self.api_url = api_url or os.getenv("GEMINI_API_URL") or f"{GEMINI_API_BASE}/{model}:generateContent"
        self.session = session or requests.Session()
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.timeout = timeout

    def _call_api(self, prompt: str) -> Any:
        # Key travels in a header so it never shows up in logged URLs
        try:
            response = self.session.post(
                self.api_url,
                headers={"x-goog-api-key": self.api_key},
                json=build_request_body(prompt),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise UpstreamUnavailable(f"Request to {self.name} failed: {e}") from e

        if response.status_code == 429:
            raise UpstreamRateLimited(f"{self.name} returned HTTP 429")

        if response.status_code >= 400:
            raise UpstreamUnavailable(
                f"{self.name} returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=snippet(response.text),
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedUpstreamResponse(
                f"{self.name} returned a non-JSON body", raw=snippet(response.text)
            ) from e

    def _extract_response(self, envelope: Any) -> LLMResponse:
        content = extract_content(envelope)
        usage = envelope.get("usageMetadata")
        if not isinstance(usage, dict):
            usage = {}
        return LLMResponse(
            content=content,
            model=self.model,
            input_tokens=usage.get("promptTokenCount"),
            output_tokens=usage.get("candidatesTokenCount"),
        )


# --- Provider Factory ---


def get_provider(provider_name: str = None, model: str = None) -> LLMProvider:
    """
    Get an LLM provider instance.

    Args:
        provider_name: "gemini" (default: from LLM_PROVIDER env var)
        model: Model name (default: provider-specific default)

    Returns:
        LLMProvider instance
    """
    if provider_name is None:
        provider_name = os.getenv("LLM_PROVIDER", "gemini").lower()

    if provider_name == "gemini":
        return GeminiProvider(model=model) if model else GeminiProvider()
    else:
        raise ValueError(f"Unknown provider: {provider_name}. Use 'gemini'")


# --- Response Parsing Utilities ---

_OPENING_FENCE = re.compile(r"^```[A-Za-z]*\s*")
_CLOSING_FENCE = re.compile(r"\s*```$")


def extract_json_block(text: str) -> str:
    """
    Pull the JSON object out of model output.

    Strips leading/trailing markdown code fences, then keeps the span from the
    first "{" to the last "}" so surrounding prose is ignored.

    Args:
        text: Raw model output

    Returns:
        The candidate JSON object text

    Raises:
        MalformedUpstreamResponse: If no {...} span is present
    """
    trimmed = text.strip()
    trimmed = _OPENING_FENCE.sub("", trimmed)
    trimmed = _CLOSING_FENCE.sub("", trimmed)

    start = trimmed.find("{")
    end = trimmed.rfind("}")
    if start == -1 or end <= start:
        raise MalformedUpstreamResponse("Model output contains no JSON object", raw=snippet(text))

    return trimmed[start : end + 1]
