"""HTTP client for the hosted language model (OpenAI-compatible chat completions).

Uses httpx with configurable timeouts and tenacity for optional retry with
exponential backoff on 429/503 and connection errors. The default of a single
attempt means failures are reported once.
"""

import json
import logging

import httpx
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config import settings
from errors import UpstreamError

logger = logging.getLogger(__name__)


class LLMServiceUnavailable(UpstreamError):
    """Model API is temporarily unavailable (retryable: 429, 503, connection error)."""


class LLMServiceError(UpstreamError):
    """Model API returned a non-retryable error or an unusable body."""


def _log_retry(state: RetryCallState) -> None:
    logger.warning(
        "Model API unavailable, retrying in %.1fs (attempt %d failed)",
        state.next_action.sleep,  # type: ignore[union-attr]
        state.attempt_number,
    )


class LLMClient:
    """HTTP client for the hosted model API with optional retry and backoff."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: int | None = None,
        connect_timeout: int | None = None,
        retry_attempts: int | None = None,
        retry_delay: float | None = None,
        retry_backoff: float | None = None,
    ):
        self._base_url = (base_url or settings.OPENROUTER_BASE_URL).rstrip("/")
        self._model = model or settings.LLM_MODEL
        attempts = retry_attempts if retry_attempts is not None else settings.LLM_RETRY_ATTEMPTS
        delay = retry_delay if retry_delay is not None else settings.LLM_RETRY_DELAY
        backoff = retry_backoff if retry_backoff is not None else settings.LLM_RETRY_BACKOFF

        # Template only; complete() runs a copy so concurrent calls keep separate state
        self._retrying = Retrying(
            retry=retry_if_exception_type(LLMServiceUnavailable),
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=delay, exp_base=backoff, max=60),
            reraise=True,
            before_sleep=_log_retry,
        )

        read_timeout = timeout if timeout is not None else settings.LLM_TIMEOUT_SECONDS
        conn_timeout = connect_timeout if connect_timeout is not None else settings.LLM_CONNECT_TIMEOUT
        key = api_key if api_key is not None else settings.OPENROUTER_API_KEY

        self._client = httpx.Client(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {key}"},
            timeout=httpx.Timeout(
                connect=float(conn_timeout),
                read=float(read_timeout),
                write=30.0,
                pool=30.0,
            ),
        )

    @property
    def model(self) -> str:
        return self._model

    def close(self):
        self._client.close()

    def complete(self, prompt: str, temperature: float = 0.1, max_tokens: int | None = None) -> str:
        """Send a single-message chat completion and return the reply text.

        Raises LLMServiceUnavailable (retryable) or LLMServiceError (non-retryable).
        """
        payload: dict = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        return self._retrying.copy()(self._send_completion, payload)

    def _send_completion(self, payload: dict) -> str:
        """Send a single completion request."""
        try:
            resp = self._client.post("/chat/completions", json=payload)
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            logger.warning("Model API connection failed: %s", e)
            raise LLMServiceUnavailable(f"Cannot connect to model API: {e}") from e
        except httpx.ReadTimeout as e:
            logger.warning("Model API read timeout: %s", e)
            raise LLMServiceUnavailable(f"Model API read timeout: {e}") from e
        except httpx.HTTPError as e:
            logger.error("Model API HTTP error: %s", e)
            raise LLMServiceError(f"Model API HTTP error: {e}") from e

        if resp.status_code in (429, 503):
            detail = _error_detail(resp)
            logger.warning("Model API returned %d: %s", resp.status_code, detail)
            raise LLMServiceUnavailable(detail)

        if resp.status_code != 200:
            detail = _error_detail(resp)
            logger.error("Model API error %d: %s", resp.status_code, detail)
            raise LLMServiceError(detail)

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMServiceError("Model API returned a non-JSON body") from e

        choices = data.get("choices") or []
        if not choices:
            raise LLMServiceError("Model API returned no choices")

        return _message_text(choices[0].get("message", {}).get("content"))

    def health(self) -> dict:
        """Check model API reachability. Returns a status dict, never raises."""
        try:
            resp = self._client.get("/models", timeout=10.0)
            return {"status": "reachable" if resp.status_code == 200 else "degraded",
                    "status_code": resp.status_code, "model": self._model}
        except Exception as e:
            logger.warning("Model API health check failed: %s", e)
            return {"status": "unreachable", "error": str(e), "model": self._model}


def _error_detail(resp: httpx.Response) -> str:
    """Pull a message out of an error body, which may be OpenAI-style or plain."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"

    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str):
            return err
        if body.get("detail"):
            return str(body["detail"])
    return f"HTTP {resp.status_code}"


def _message_text(content) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        # content parts: [{"type": "text", "text": "..."}]
        parts = [p.get("text", "") for p in content if isinstance(p, dict)]
        if parts:
            return "".join(parts)
    return json.dumps(content)
