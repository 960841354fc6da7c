"""HTTP submission transport for public form links."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from fieldforms.config import FormsConfig
from fieldforms.errors import SubmissionError
from fieldforms.submission import SubmissionPayload

logger = logging.getLogger(__name__)


class SubmissionTransport(Protocol):
    def send(self, payload: SubmissionPayload) -> None:
        ...


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return "Erreur lors de la soumission"


class HttpSubmissionTransport:
    """
    Posts payloads to `{base_url}/public-links/form/{token}/submit`.

    Network errors and non-2xx responses raise a retryable
    SubmissionError carrying the server message when one is sent.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        self.url = f"{base_url.rstrip('/')}/public-links/form/{token}/submit"
        self._client = client
        self.timeout = timeout

    @classmethod
    def from_config(
        cls, config: FormsConfig, token: str, client: Optional[httpx.Client] = None
    ) -> "HttpSubmissionTransport":
        return cls(config.api_base_url, token, client=client, timeout=config.request_timeout_seconds)

    def send(self, payload: SubmissionPayload) -> None:
        body = payload.to_dict()
        logger.info("Submitting %d answers to %s", len(payload.form_data), self.url)
        try:
            if self._client is not None:
                response = self._client.post(self.url, json=body)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(self.url, json=body)
        except httpx.HTTPError as e:
            logger.warning("Submission transport error: %s", e)
            raise SubmissionError(f"Network error: {e}", retryable=True) from e

        if response.is_success:
            logger.info("Submission accepted (%s)", response.status_code)
            return

        status = response.status_code
        message = _error_message(response)
        logger.warning("Submission rejected (%s): %s", status, message)
        raise SubmissionError(message, status_code=status, retryable=True)
