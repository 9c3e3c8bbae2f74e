# This file implements the HTTP client for the targeting and channel endpoints.
# It exists so transport details stay out of the gateway and every failure arrives already classified.
# Timeout-class failures (timeouts, dropped connections, no network) are split from definite negative answers.
# The client makes exactly one attempt per call; fallback and retry policy belong to the caller.

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from typing import Any

import requests

from campaign_planner.acquisition.errors import NetworkFailure, OtherNetworkFailure, TimeoutClassFailure
from campaign_planner.acquisition.gateway_config import GatewayConfig

REQUEST_HEADERS = {
    "Accept": "application/json",
    "Cache-Control": "no-cache",
}
CHUNK_SIZE = 64 * 1024


def _iter_causes(exc: BaseException) -> Iterator[BaseException]:
    pending: list[BaseException] = [exc]
    seen: set[int] = set()
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current

        linked: list[Any] = [current.__cause__, current.__context__, getattr(current, "reason", None)]
        linked.extend(current.args)
        pending.extend(item for item in linked if isinstance(item, BaseException))


def is_timeout_class(exc: BaseException) -> bool:
    if isinstance(exc, (requests.Timeout, requests.exceptions.ChunkedEncodingError)):
        return True
    # TLS and proxy failures are ConnectionError subclasses but definite negative answers.
    if isinstance(exc, (requests.exceptions.SSLError, requests.exceptions.ProxyError)):
        return False
    if isinstance(exc, requests.ConnectionError):
        return not any(isinstance(cause, ConnectionRefusedError) for cause in _iter_causes(exc))
    return False


def classify_transport_error(exc: requests.RequestException, url: str) -> NetworkFailure:
    if is_timeout_class(exc):
        return TimeoutClassFailure(f"Request to {url} did not complete: {exc}", url=url)
    return OtherNetworkFailure(f"Request to {url} failed: {exc}", url=url)


class CampaignApiClient:
    def __init__(
        self,
        *,
        config: GatewayConfig,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        self._clock = clock

    def get_targeting(self) -> bytes:
        return self._request_bytes(self.config.targeting_url)

    def get_channel(self, external_id: str) -> bytes:
        return self._request_bytes(self.config.channel_url(external_id))

    def _request_bytes(self, url: str) -> bytes:
        request_timeout = self.config.request_timeout_seconds
        deadline = self._clock() + self.config.resource_timeout_seconds
        try:
            response = self.session.get(
                url,
                headers=REQUEST_HEADERS,
                timeout=(request_timeout, request_timeout),
                stream=True,
            )
        except requests.RequestException as exc:
            raise classify_transport_error(exc, url) from exc

        try:
            if not 200 <= response.status_code < 300:
                raise OtherNetworkFailure(
                    f"Request to {url} returned status {response.status_code}",
                    url=url,
                    status_code=response.status_code,
                )
            return self._read_body(response, url=url, deadline=deadline)
        finally:
            response.close()

    def _read_body(self, response: requests.Response, *, url: str, deadline: float) -> bytes:
        # The deadline only fails a read that still has chunks arriving; a body that just finished late is kept.
        chunks: list[bytes] = []
        overran = False
        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if overran:
                    raise TimeoutClassFailure(
                        f"Request to {url} exceeded {self.config.resource_timeout_seconds}s overall",
                        url=url,
                    )
                if chunk:
                    chunks.append(chunk)
                overran = self._clock() > deadline
        except requests.RequestException as exc:
            raise classify_transport_error(exc, url) from exc
        return b"".join(chunks)
