"""Concurrent probe dispatch.

One asyncio task per probe, admitted through a semaphore so that at most
``concurrency`` requests are in flight. Results are folded into a
:class:`RunContext`, which serializes output and counting behind a
single lock: the progress and outcome lines of one probe are always
printed back to back.
"""
import asyncio
import time
from dataclasses import dataclass
from typing import Callable, List, Sequence

from ssrfprobe.detector import Verdict, classify
from ssrfprobe.exceptions import ConfigurationError, TransportError
from ssrfprobe.logger import get_logger
from ssrfprobe.payloads.base import Category, ProbeDescriptor
from ssrfprobe.request_builder import RequestBuilder
from ssrfprobe.utils.reporter import ScanReporter

LOG = get_logger("dispatcher")

Classifier = Callable[..., Verdict]


@dataclass
class ScanOutcome:
    probe_value: str
    http_method: str
    test_url: str
    category: Category
    status_code: int = 0
    response_length: int = 0
    response_time_ms: int = 0
    vulnerable: bool = False
    pending: bool = False
    evidence: str = ""
    error_message: str = ""


@dataclass
class RunTally:
    vulnerable_count: int = 0
    pending_count: int = 0
    error_count: int = 0
    probe_count: int = 0


class RunContext:
    """Owns the tally and the reporter for one run."""

    def __init__(self, reporter: ScanReporter, param: str):
        self.reporter = reporter
        self.param = param
        self.tally = RunTally()
        self._lock = asyncio.Lock()

    async def record(self, outcome: ScanOutcome) -> None:
        async with self._lock:
            self.tally.probe_count += 1
            self.reporter.progress(outcome.http_method, outcome.probe_value)

            if outcome.error_message:
                self.tally.error_count += 1
                self.reporter.error(outcome.http_method, outcome.test_url, outcome.error_message)
            elif outcome.vulnerable:
                self.tally.vulnerable_count += 1
                self.reporter.vulnerable(outcome.http_method, outcome.test_url, self.param, outcome.probe_value, outcome.evidence)
            elif outcome.pending:
                self.tally.pending_count += 1
                self.reporter.pending(outcome.http_method, outcome.test_url, self.param, outcome.probe_value, outcome.evidence)


class ProbeDispatcher:
    def __init__(self, requester, request_builder: RequestBuilder, context: RunContext, concurrency: int = 10, delay: float = 0, classifier: Classifier = classify):
        if concurrency < 1:
            raise ConfigurationError(f"Concurrency must be at least 1, got {concurrency}")
        self.requester = requester
        self.request_builder = request_builder
        self.context = context
        self.concurrency = concurrency
        self.delay = delay
        self.classifier = classifier

    async def dispatch(self, catalog: Sequence[ProbeDescriptor]) -> RunTally:
        gate = asyncio.Semaphore(self.concurrency)
        tasks: List[asyncio.Task] = []

        LOG.info("Dispatching %d probes with concurrency %d", len(catalog), self.concurrency)
        for probe in catalog:
            await gate.acquire()
            tasks.append(asyncio.create_task(self._run_probe(probe, gate)))

        await asyncio.gather(*tasks)
        return self.context.tally

    async def _run_probe(self, probe: ProbeDescriptor, gate: asyncio.Semaphore) -> None:
        try:
            if self.delay > 0:
                await asyncio.sleep(self.delay)
            try:
                outcome = await self.execute(probe)
            except Exception as e:
                LOG.exception("Probe %s failed unexpectedly", probe.value)
                outcome = self._failed_outcome(probe, e)
            await self.context.record(outcome)
        finally:
            gate.release()

    def _failed_outcome(self, probe: ProbeDescriptor, error: Exception) -> ScanOutcome:
        try:
            request = self.request_builder.build(probe.value)
            method, test_url = request.method, request.url
        except Exception:
            method, test_url = self.request_builder.method.value, self.request_builder.target_url
        return ScanOutcome(
            probe_value=probe.value,
            http_method=method,
            test_url=test_url,
            category=probe.category,
            error_message=f"request failed: {str(error) or type(error).__name__}",
        )

    async def execute(self, probe: ProbeDescriptor) -> ScanOutcome:
        """Send one probe and classify the response. Never raises for transport errors."""
        request = self.request_builder.build(probe.value)
        outcome = ScanOutcome(
            probe_value=probe.value,
            http_method=request.method,
            test_url=request.url,
            category=probe.category,
        )

        started = time.perf_counter()
        try:
            response = await self.requester.request(request.method, request.url, data=request.body, headers=request.headers)
        except TransportError as e:
            outcome.error_message = e.reason
            outcome.response_time_ms = int((time.perf_counter() - started) * 1000)
            return outcome

        outcome.status_code = response.status
        outcome.response_length = response.length
        outcome.response_time_ms = response.elapsed_ms

        verdict = self.classifier(response.status, response.headers, response.text, probe)
        outcome.vulnerable = verdict.vulnerable
        outcome.pending = verdict.pending
        outcome.evidence = verdict.evidence
        return outcome
