# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Run handshake attempts over a candidate list and collect the trace."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Mapping, Sequence

import httpx

from ..errors import ConfigurationError, categorize_exception
from ..models import AttemptResult, EndpointCandidate, ProbeTrace
from ..transport.client import HandshakeTransport, create_default_transport
from ..transport.headers import header_value
from ..transport.models import HandshakeRequest
from .candidates import candidate_from_redirect

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 7.0
REDIRECT_STATUSES = frozenset({301, 302})

Recorder = Callable[[AttemptResult], None]


class ProbeRunner:
    """
    Attempts candidates in order and stops at the first successful handshake.

    With ``concurrency=1`` attempts run one at a time in candidate order. With a larger
    value a bounded pool runs them concurrently; the trace is then ordered by when each
    outcome was determined, and everything still in flight is cancelled once a
    handshake succeeds.
    """

    def __init__(self, transport: HandshakeTransport | None = None):
        self.transport = transport or create_default_transport()

    def run(
        self,
        candidates: Sequence[EndpointCandidate],
        *,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Mapping[str, str] | None = None,
        max_redirect_hops: int = 1,
        concurrency: int = 1,
    ) -> ProbeTrace:
        """Blocking wrapper around :meth:`arun`."""
        return asyncio.run(
            self.arun(
                candidates,
                timeout=timeout,
                headers=headers,
                max_redirect_hops=max_redirect_hops,
                concurrency=concurrency,
            )
        )

    async def arun(
        self,
        candidates: Sequence[EndpointCandidate],
        *,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Mapping[str, str] | None = None,
        max_redirect_hops: int = 1,
        concurrency: int = 1,
    ) -> ProbeTrace:
        if timeout is None or timeout <= 0:
            raise ConfigurationError(f"Per-attempt timeout must be positive, got {timeout!r}")
        if max_redirect_hops < 0:
            raise ConfigurationError("max_redirect_hops cannot be negative")
        if concurrency < 1:
            raise ConfigurationError("concurrency must be at least 1")

        attempts: list[AttemptResult] = []
        credential_headers = dict(headers or {})

        if concurrency == 1:
            await self._run_sequential(candidates, attempts.append, timeout, credential_headers, max_redirect_hops)
        else:
            await self._run_pool(candidates, attempts, timeout, credential_headers, max_redirect_hops, concurrency)

        trace = ProbeTrace(attempts=tuple(attempts))
        winner = trace.winner
        if winner is not None:
            logger.info("Handshake succeeded: %s [%s]", winner.candidate.url, winner.candidate.protocol_header)
        else:
            logger.info("No candidate connected after %d attempts", len(trace))
        return trace

    async def _run_sequential(
        self,
        candidates: Sequence[EndpointCandidate],
        record: Recorder,
        timeout: float,
        headers: dict[str, str],
        max_redirect_hops: int,
    ) -> None:
        for candidate in candidates:
            final = await self._attempt_chain(candidate, record, timeout, headers, max_redirect_hops)
            if final.ok:
                return

    async def _run_pool(
        self,
        candidates: Sequence[EndpointCandidate],
        attempts: list[AttemptResult],
        timeout: float,
        headers: dict[str, str],
        max_redirect_hops: int,
        concurrency: int,
    ) -> None:
        semaphore = asyncio.Semaphore(concurrency)
        found = asyncio.Event()

        # Results are appended from the event loop thread with no await in between, so the
        # list has a single writer; a resolved attempt is recorded before anything can cancel it.
        def record(result: AttemptResult) -> None:
            attempts.append(result)
            if result.ok:
                found.set()

        async def worker(candidate: EndpointCandidate) -> None:
            async with semaphore:
                if found.is_set():
                    return
                await self._attempt_chain(candidate, record, timeout, headers, max_redirect_hops)

        pending_tasks = {asyncio.create_task(worker(candidate)) for candidate in candidates}
        try:
            while pending_tasks and not found.is_set():
                done, pending_tasks = await asyncio.wait(pending_tasks, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    task.result()
        finally:
            for task in pending_tasks:
                task.cancel()
            if pending_tasks:
                await asyncio.gather(*pending_tasks, return_exceptions=True)

    async def _attempt_chain(
        self,
        candidate: EndpointCandidate,
        record: Recorder,
        timeout: float,
        headers: dict[str, str],
        hops_left: int,
    ) -> AttemptResult:
        """Attempt one candidate and follow redirects while the hop budget lasts."""
        result = await self.attempt(candidate, timeout=timeout, headers=headers)
        record(result)
        while hops_left > 0 and result.status_code in REDIRECT_STATUSES and result.location:
            follow_up = candidate_from_redirect(result.location, result.candidate)
            if follow_up is None:
                logger.debug("Not following redirect to %r: not an http(s)/ws(s) URL", result.location)
                break
            hops_left -= 1
            result = await self.attempt(follow_up, timeout=timeout, headers=headers, redirected_from=result)
            record(result)
        return result

    async def attempt(
        self,
        candidate: EndpointCandidate,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Mapping[str, str] | None = None,
        redirected_from: AttemptResult | None = None,
    ) -> AttemptResult:
        """Run one handshake with a hard wall-clock bound and classify what happened."""
        request = HandshakeRequest(
            url=candidate.url,
            protocols=candidate.protocols,
            headers=dict(headers or {}),
            timeout=timeout,
        )
        started = time.monotonic()
        try:
            response = await asyncio.wait_for(self.transport.handshake(request), timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            result = AttemptResult.timed_out(
                candidate,
                redirected_from=redirected_from,
                elapsed=time.monotonic() - started,
            )
        except Exception as exc:  # noqa: BLE001
            result = AttemptResult.transport_error(
                candidate,
                str(exc) or type(exc).__name__,
                categorize_exception(exc),
                redirected_from=redirected_from,
                elapsed=time.monotonic() - started,
            )
        else:
            elapsed = time.monotonic() - started
            if response.upgraded:
                result = AttemptResult.connected(
                    candidate,
                    negotiated_protocol=header_value(response.headers, "sec-websocket-protocol") or None,
                    redirected_from=redirected_from,
                    elapsed=elapsed,
                )
            else:
                result = AttemptResult.rejected(
                    candidate,
                    response.status_code,
                    header_value(response.headers, "location") or None,
                    body_snippet=response.body_snippet or None,
                    redirected_from=redirected_from,
                    elapsed=elapsed,
                )

        logger.debug("%s [%s] -> %s", candidate.url, candidate.protocol_header, result.summary)
        return result


__all__ = ["DEFAULT_TIMEOUT", "REDIRECT_STATUSES", "ProbeRunner"]

