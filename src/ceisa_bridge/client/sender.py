"""Outbound sender -- transmits a prepared submission and classifies the answer.

:class:`OutboundSender` wraps :class:`httpx.Client` and turns every response
into an :class:`~ceisa_bridge.models.AuthOutcome`:

- **Dry-run mode** -- nothing is sent; a synthetic success outcome reports
  the endpoint and payload size.
- **Body decoding** -- the response body is read as a JSON object; anything
  else is replaced by ``{"status_code": ..., "status": ...}``.
- **Classification** -- 2xx is success; every other status is a failure
  outcome carrying ``"API request failed with status: ..."``.
- **Error mapping** -- transport failures and timeouts raise
  :class:`~ceisa_bridge.exceptions.NetworkError`; a malformed endpoint URL
  raises :class:`~ceisa_bridge.exceptions.ValidationError`. Nothing is retried.

It also implements the connectivity probe, which reports an unreachable
endpoint as a negative :class:`~ceisa_bridge.models.ProbeResult` instead of
raising.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from ceisa_bridge.exceptions import NetworkError, ValidationError
from ceisa_bridge.models import AuthOutcome, OutboundRequest, ProbeResult

logger = logging.getLogger(__name__)

DRY_RUN_MESSAGE = "Dry run completed - no data was actually sent"


class OutboundSender:
    """Sends :class:`~ceisa_bridge.models.OutboundRequest` objects.

    Args:
        transport: Optional :mod:`httpx` transport, e.g. an
            :class:`httpx.MockTransport` in tests.

    Example::

        sender = OutboundSender()
        outcome = sender.send(OutboundRequest(url=endpoint, json_body=doc))
        if not outcome.success:
            print(outcome.error)
    """

    def __init__(self, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._transport = transport

    # ------------------------------------------------------------------ #
    # Submission
    # ------------------------------------------------------------------ #

    def send(self, request: OutboundRequest, dry_run: bool = False) -> AuthOutcome:
        """Send *request* and classify the response.

        Args:
            request: Fully prepared request, credentials included.
            dry_run: Report what would be sent without any network I/O.

        Returns:
            An :class:`~ceisa_bridge.models.AuthOutcome`; ``success`` is true
            for 2xx responses and always for dry runs.

        Raises:
            ValidationError: If the endpoint URL is missing or malformed.
            NetworkError: If the request cannot be sent or times out.
        """
        if dry_run:
            return self._dry_run_outcome(request)

        if not request.url:
            raise ValidationError("API endpoint is required")

        logger.info(
            "Sending %s to %s (%d bytes)",
            request.method,
            request.url,
            payload_size(request.json_body),
        )
        try:
            with httpx.Client(timeout=request.timeout, transport=self._transport) as client:
                response = client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    json=request.json_body,
                )
        except httpx.TimeoutException as exc:
            logger.error("Request to %s timed out: %s", request.url, exc)
            raise NetworkError(f"Request to {request.url} timed out: {exc}") from exc
        except httpx.InvalidURL as exc:
            logger.error("Invalid endpoint URL %s: %s", request.url, exc)
            raise ValidationError(f"invalid endpoint URL: {exc}") from exc
        except httpx.TransportError as exc:
            logger.error("Request to %s failed: %s", request.url, exc)
            raise NetworkError(f"Failed to send request to {request.url}: {exc}") from exc

        return self._to_outcome(response)

    # ------------------------------------------------------------------ #
    # Connectivity probe
    # ------------------------------------------------------------------ #

    def probe(self, endpoint: str, timeout: float = 30) -> ProbeResult:
        """Check whether *endpoint* answers a plain ``GET`` with a 2xx status.

        Failures are reported in the result, never raised.
        """
        if not endpoint:
            return ProbeResult(endpoint=endpoint, reachable=False, message="Endpoint URL is required")

        try:
            with httpx.Client(timeout=timeout, transport=self._transport) as client:
                response = client.get(endpoint, headers={"Accept": "application/json"})
        except httpx.InvalidURL as exc:
            logger.warning("Connectivity probe to %s not sent: %s", endpoint, exc)
            return ProbeResult(
                endpoint=endpoint,
                reachable=False,
                message=f"Failed to create request: {exc}",
            )
        except httpx.TransportError as exc:
            logger.warning("Connectivity probe to %s failed: %s", endpoint, exc)
            return ProbeResult(
                endpoint=endpoint,
                reachable=False,
                message=f"Connection failed: {exc}",
            )

        status = response.status_code
        if 200 <= status < 300:
            return ProbeResult(
                endpoint=endpoint,
                reachable=True,
                message=f"Connection successful (Status: {status})",
                status_code=status,
            )
        return ProbeResult(
            endpoint=endpoint,
            reachable=False,
            message=f"Server responded with status: {status}",
            status_code=status,
        )

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _dry_run_outcome(request: OutboundRequest) -> AuthOutcome:
        body = {
            "message": DRY_RUN_MESSAGE,
            "endpoint": request.url,
            "data_size": f"{payload_size(request.json_body)} bytes",
            "dry_run": True,
        }
        logger.info("Dry run for %s, nothing sent", request.url or "(no endpoint)")
        return AuthOutcome(success=True, status_code=200, body=body)

    @staticmethod
    def _to_outcome(response: httpx.Response) -> AuthOutcome:
        status = response.status_code
        status_text = f"{status} {response.reason_phrase}".strip()

        body: dict[str, Any]
        try:
            decoded = response.json()
        except ValueError:
            decoded = None
        if isinstance(decoded, dict):
            body = decoded
        else:
            body = {"status_code": status, "status": status_text}

        success = 200 <= status < 300
        body["success"] = success
        body["status_code"] = status

        error: Optional[str] = None
        if not success:
            error = f"API request failed with status: {status_text}"
            body["error"] = error
            logger.warning("Submission to %s rejected: %s", response.request.url, status_text)

        return AuthOutcome(success=success, status_code=status, body=body, error=error)


def payload_size(payload: Any) -> int:
    """Size in bytes of *payload* serialised as compact JSON."""
    if payload is None:
        return 0
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)
    return len(text.encode("utf-8"))
