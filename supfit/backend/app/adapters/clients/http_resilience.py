# app/adapters/clients/http_resilience.py
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from ...config import settings

log = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})
MAX_BACKOFF_S = 5.0


@dataclass
class HostCircuit:
    fails: int = 0
    opened_at: float | None = None

    def is_open(self, now: float) -> bool:
        if self.opened_at is None:
            return False
        if now - self.opened_at >= float(settings.HTTP_CIRCUIT_RESET_S):
            # half-open: let the next call through
            self.opened_at = None
            self.fails = int(settings.HTTP_CIRCUIT_FAIL_THRESHOLD) - 1
            return False
        return True

    def success(self) -> None:
        self.fails = 0
        self.opened_at = None

    def failure(self, host: str) -> None:
        self.fails += 1
        if self.fails >= int(settings.HTTP_CIRCUIT_FAIL_THRESHOLD) and self.opened_at is None:
            log.warning("circuit opened host=%s fails=%d", host, self.fails)
            self.opened_at = time.monotonic()


_CIRCUITS: dict[str, HostCircuit] = {}
_LAST_CALL: dict[str, float] = {}


class CircuitOpenError(httpx.HTTPError):
    pass


def _circuit(host: str) -> HostCircuit:
    return _CIRCUITS.setdefault(host, HostCircuit())


def reset_circuit(host: str | None = None) -> None:
    if host is None:
        _CIRCUITS.clear()
        _LAST_CALL.clear()
    else:
        _CIRCUITS.pop(host, None)
        _LAST_CALL.pop(host, None)


def circuit_snapshot() -> dict[str, dict[str, Any]]:
    return {h: {"fails": c.fails, "open": c.opened_at is not None} for h, c in _CIRCUITS.items()}


async def _pace(host: str) -> None:
    """Space calls to one host at least 1/RPS apart."""
    rps = float(settings.HTTP_RATE_LIMIT_RPS)
    if rps <= 0:
        return
    now = time.monotonic()
    wait = _LAST_CALL.get(host, 0.0) + 1.0 / rps - now
    _LAST_CALL[host] = now + max(0.0, wait)
    if wait > 0:
        await asyncio.sleep(wait)


def _retry_after_s(resp: httpx.Response | None) -> float | None:
    if resp is None:
        return None
    raw = resp.headers.get("retry-after")
    try:
        return max(0.0, float(raw)) if raw is not None else None
    except ValueError:
        return None


async def resilient_request(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    json: Any | None = None,
    timeout_s: float | None = None,
    max_retries: int | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.Response:
    """
    Paced request with retry/backoff on 429/5xx/network errors and a per-host
    circuit breaker. Raises the last httpx error once retries run out.
    The caller's overall deadline is enforced upstream (asyncio.wait_for).
    """
    host = httpx.URL(url).host or url
    circuit = _circuit(host)
    if circuit.is_open(time.monotonic()):
        raise CircuitOpenError(f"circuit_open: refusing call to {host}")

    timeout = httpx.Timeout(float(timeout_s if timeout_s is not None else settings.HTTP_TIMEOUT_S))
    retries = int(settings.HTTP_MAX_RETRIES if max_retries is None else max_retries)
    backoff = float(settings.HTTP_BACKOFF_BASE_S)

    last_exc: httpx.HTTPError | None = None
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        for attempt in range(retries + 1):
            await _pace(host)
            resp: httpx.Response | None = None
            try:
                resp = await client.request(method, url, headers=headers, params=params, json=json)
                if resp.status_code in RETRYABLE_STATUS:
                    raise httpx.HTTPStatusError(f"retryable status {resp.status_code}", request=resp.request, response=resp)
                resp.raise_for_status()
            except (httpx.TimeoutException, httpx.NetworkError, httpx.HTTPStatusError) as e:
                last_exc = e
                if isinstance(e, httpx.HTTPStatusError) and e.response.status_code not in RETRYABLE_STATUS:
                    # 4xx other than 429 will not get better on retry
                    raise
                circuit.failure(host)
                if attempt >= retries or circuit.opened_at is not None:
                    break
                delay = _retry_after_s(resp) or backoff * (2**attempt)
                log.debug("retrying host=%s attempt=%d in %.2fs err=%s", host, attempt + 1, delay, type(e).__name__)
                await asyncio.sleep(min(MAX_BACKOFF_S, delay))
                continue

            circuit.success()
            return resp

    assert last_exc is not None
    raise last_exc
