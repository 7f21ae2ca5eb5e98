# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
# See LICENSE for details
"""compmatrix - scenario matrix and case runner

`ScenarioMatrix` enumerates algorithm x I/O kind x chunking strategy (then
payload and direction) in a fixed nested order so that every scenario has a
stable identifier. `CaseRunner` drives one scenario through setup, drive,
finalize, verify and report, and turns every error into a failed result so
that a single broken combination never hides the others.
"""

from __future__ import annotations

from .algos import Algorithm, AlgorithmRegistry, DEFAULT_REGISTRY
from .chunking import strategy_params
from .common.constants import DEFAULT_CONCURRENCY, DEFAULT_READ_SIZE, DEFAULT_SCENARIO_TIMEOUT
from .common.models import AlgorithmId, ChunkingParams, ChunkingStrategy, Direction, IOKind, MatrixConfig
from .common.strenum import StrEnum
from .errors import (
    DoubleCloseError,
    OutputMismatchError,
    ScenarioTimeoutError,
    TruncatedStreamError,
    UnexpectedTransformError,
    UsedAfterCloseError,
)
from .impls import AnyAdapter, AsyncIOAdapter, IOAdapter, IOAdapterSet
from .input_stream import InputStream
from .notifier.interface import ResultNotifier
from .notifier.null import NullNotifier
from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, List, Optional, Tuple, Type

import asyncio
import logging
import threading
import time

LOG = logging.getLogger(__name__)


class FailureKind(StrEnum):
    output_mismatch = "OutputMismatch"
    used_after_close = "UsedAfterClose"
    double_close = "DoubleClose"
    not_closed = "NotClosed"
    unexpected_error = "UnexpectedTransformError"
    expected_error_missing = "ExpectedErrorMissing"
    timeout = "Timeout"


@dataclass(frozen=True)
class Scenario:
    algorithm: AlgorithmId
    io_kind: IOKind
    strategy: ChunkingStrategy
    payload: bytes
    direction: Direction = Direction.encode
    payload_name: str = "payload"
    # Set for malformed-input scenarios; the run passes only if an error of this kind is raised
    expected_error: Optional[Type[BaseException]] = None

    @property
    def scenario_id(self) -> str:
        scenario_id = f"{self.algorithm} / {self.io_kind} / {self.strategy} / {self.payload_name} [{self.direction}]"
        if self.expected_error is not None:
            scenario_id += " malformed"
        return scenario_id

    def __str__(self) -> str:
        return self.scenario_id


@dataclass(frozen=True)
class ScenarioResult:
    passed: bool
    failure: Optional[FailureKind] = None
    diagnostic: str = ""
    offset: Optional[int] = None
    output: bytes = field(default=b"", repr=False)
    closed_exactly_once: bool = False
    duration: float = 0.0

    @classmethod
    def ok(cls, output: bytes = b"", *, closed_exactly_once: bool = True, diagnostic: str = "") -> ScenarioResult:
        return cls(passed=True, output=output, closed_exactly_once=closed_exactly_once, diagnostic=diagnostic)

    @classmethod
    def fail(
        cls,
        failure: FailureKind,
        diagnostic: str,
        *,
        offset: Optional[int] = None,
        output: bytes = b"",
        closed_exactly_once: bool = False,
    ) -> ScenarioResult:
        return cls(
            passed=False,
            failure=failure,
            diagnostic=diagnostic,
            offset=offset,
            output=output,
            closed_exactly_once=closed_exactly_once,
        )


@dataclass
class MatrixReport:
    results: List[Tuple[str, ScenarioResult]] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for _, result in self.results if result.passed)

    @property
    def failed(self) -> int:
        return len(self.results) - self.passed

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def failures(self) -> List[Tuple[str, ScenarioResult]]:
        return [(scenario_id, result) for scenario_id, result in self.results if not result.passed]

    def result_for(self, scenario_id: str) -> ScenarioResult:
        for result_id, result in self.results:
            if result_id == scenario_id:
                return result
        raise KeyError(scenario_id)

    def summary(self) -> str:
        return f"{len(self.results)} scenarios, {self.passed} passed, {self.failed} failed"

    def __iter__(self) -> Iterator[Tuple[str, ScenarioResult]]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)


def first_difference(expected: bytes, actual: bytes) -> Optional[int]:
    """Offset of the first differing byte, or None if both are equal"""
    if expected == actual:
        return None
    for offset, (left, right) in enumerate(zip(expected, actual)):
        if left != right:
            return offset
    return min(len(expected), len(actual))


class ScenarioMatrix:
    """Deterministic cross product of the configured axes"""

    def __init__(self, config: Optional[MatrixConfig] = None, registry: AlgorithmRegistry = DEFAULT_REGISTRY) -> None:
        self.config = config or MatrixConfig()
        self.registry = registry

    def _algorithms(self) -> Iterator[AlgorithmId]:
        available = set(self.registry.available())
        for algorithm in self.config.algorithms:
            algorithm = AlgorithmId(algorithm)
            if self.config.skip_unavailable and algorithm in self.registry and algorithm not in available:
                LOG.info("Skipping scenarios for %s, compression library is not available", algorithm)
                continue
            yield algorithm

    def scenarios(self) -> Iterator[Scenario]:
        config = self.config
        for algorithm in self._algorithms():
            for io_kind in config.io_kinds:
                for strategy in config.strategies:
                    for payload_name, payload in config.payloads.items():
                        for direction in config.directions:
                            yield Scenario(
                                algorithm=algorithm,
                                io_kind=IOKind(io_kind),
                                strategy=ChunkingStrategy(strategy),
                                payload=payload,
                                direction=Direction(direction),
                                payload_name=payload_name,
                            )
        if config.include_malformed:
            yield from self.malformed_scenarios()

    def malformed_scenarios(self) -> Iterator[Scenario]:
        """Truncated compressed input for every algorithm able to detect it"""
        config = self.config
        for algorithm in self._algorithms():
            if algorithm not in self.registry or not self.registry.get(algorithm).detects_truncation:
                continue
            for io_kind in config.io_kinds:
                for strategy in config.strategies:
                    for payload_name, payload in config.payloads.items():
                        yield Scenario(
                            algorithm=algorithm,
                            io_kind=IOKind(io_kind),
                            strategy=ChunkingStrategy(strategy),
                            payload=payload,
                            direction=Direction.decode,
                            payload_name=payload_name,
                            expected_error=TruncatedStreamError,
                        )

    def __iter__(self) -> Iterator[Scenario]:
        return self.scenarios()

    def __len__(self) -> int:
        return sum(1 for _ in self.scenarios())


class CaseRunner:
    def __init__(
        self,
        registry: AlgorithmRegistry = DEFAULT_REGISTRY,
        adapters: Optional[IOAdapterSet] = None,
        *,
        chunking: Optional[ChunkingParams] = None,
        read_size: int = DEFAULT_READ_SIZE,
        timeout: float = DEFAULT_SCENARIO_TIMEOUT,
        max_concurrency: int = DEFAULT_CONCURRENCY,
        double_finalize: bool = False,
        notifier: Optional[ResultNotifier] = None,
    ) -> None:
        self.registry = registry
        self.adapters = adapters or IOAdapterSet()
        self.chunking = chunking or ChunkingParams()
        self.read_size = read_size
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        self.double_finalize = double_finalize
        self.notifier = notifier or NullNotifier()

    @classmethod
    def from_config(cls, config: MatrixConfig, **kwargs: object) -> CaseRunner:
        return cls(
            chunking=config.chunking,
            read_size=config.read_size,
            timeout=config.timeout,
            max_concurrency=config.max_concurrency,
            double_finalize=config.double_finalize,
            **kwargs,  # type: ignore[arg-type]
        )

    # Setup

    def build_input(self, scenario: Scenario, algorithm: Algorithm) -> InputStream:
        data = scenario.payload
        if scenario.direction == Direction.decode:
            data = algorithm.encode(data)
            if scenario.expected_error is not None:
                data = data[: len(data) // 2]
        params = strategy_params(scenario.strategy, self.chunking, algorithm.max_block_size)
        return InputStream.from_payload(data, scenario.strategy, **params)

    def _setup(self, scenario: Scenario) -> Tuple[Algorithm, AnyAdapter, InputStream]:
        algorithm = self.registry.get(scenario.algorithm)
        round_trip = algorithm.decode(algorithm.encode(scenario.payload))
        offset = first_difference(scenario.payload, round_trip)
        if offset is not None:
            raise OutputMismatchError(f"reference round trip of {algorithm.name} changed the payload", offset=offset)
        input_stream = self.build_input(scenario, algorithm)
        transformer = algorithm.new_transformer(scenario.direction)
        adapter = self.adapters.create(scenario.io_kind, transformer, self.read_size)
        return algorithm, adapter, input_stream

    # Drive and finalize

    def _drive_sync(self, scenario: Scenario, algorithm: Algorithm, adapter: IOAdapter, input_stream: InputStream) -> ScenarioResult:
        try:
            for fragment in input_stream.fragments():
                adapter.submit(fragment)
            adapter.finalize()
            if self.double_finalize:
                before = adapter.output()
                adapter.finalize()
                self._check_finalize_idempotent(before, adapter.output())
        except Exception as ex:  # pylint: disable=broad-except
            try:
                adapter.close()
            except Exception as close_ex:  # pylint: disable=broad-except
                LOG.debug("Closing %s after failure also failed: %r", scenario, close_ex)
            return self._error_result(scenario, adapter, ex)
        try:
            adapter.close()
        except Exception as ex:  # pylint: disable=broad-except
            return self._error_result(scenario, adapter, ex)
        return self.verify(scenario, algorithm, adapter)

    async def _drive_async(
        self, scenario: Scenario, algorithm: Algorithm, adapter: AsyncIOAdapter, input_stream: InputStream
    ) -> ScenarioResult:
        try:
            for fragment in input_stream.fragments():
                await adapter.submit(fragment)
            await adapter.finalize()
            if self.double_finalize:
                before = adapter.output()
                await adapter.finalize()
                self._check_finalize_idempotent(before, adapter.output())
        except Exception as ex:  # pylint: disable=broad-except
            try:
                await adapter.close()
            except Exception as close_ex:  # pylint: disable=broad-except
                LOG.debug("Closing %s after failure also failed: %r", scenario, close_ex)
            return self._error_result(scenario, adapter, ex)
        try:
            await adapter.close()
        except Exception as ex:  # pylint: disable=broad-except
            return self._error_result(scenario, adapter, ex)
        return self.verify(scenario, algorithm, adapter)

    @staticmethod
    def _check_finalize_idempotent(before: bytes, after: bytes) -> None:
        offset = first_difference(before, after)
        if offset is not None:
            raise OutputMismatchError("second finalize changed the output", offset=offset)

    # Verify and report

    def verify(self, scenario: Scenario, algorithm: Algorithm, adapter: AnyAdapter) -> ScenarioResult:
        output = adapter.output()
        closed_exactly_once = adapter.tracker.was_closed_exactly_once()
        if scenario.expected_error is not None:
            return ScenarioResult.fail(
                FailureKind.expected_error_missing,
                f"expected {scenario.expected_error.__name__} but the scenario completed",
                output=output,
                closed_exactly_once=closed_exactly_once,
            )
        if scenario.direction == Direction.encode:
            if algorithm.exact_framing:
                offset = first_difference(algorithm.encode(scenario.payload), output)
                if offset is not None:
                    return ScenarioResult.fail(
                        FailureKind.output_mismatch,
                        f"encoded output differs from single-shot reference at offset {offset}",
                        offset=offset,
                        output=output,
                        closed_exactly_once=closed_exactly_once,
                    )
            if algorithm.has_trailer and not output:
                return ScenarioResult.fail(
                    FailureKind.output_mismatch,
                    "encoder produced no output, end-of-stream trailer is missing",
                    offset=0,
                    output=output,
                    closed_exactly_once=closed_exactly_once,
                )
            try:
                decoded = algorithm.decode(output)
            except Exception as ex:  # pylint: disable=broad-except
                return ScenarioResult.fail(
                    FailureKind.unexpected_error,
                    f"reference decoder rejected the output: {ex!r}",
                    output=output,
                    closed_exactly_once=closed_exactly_once,
                )
        else:
            decoded = output
        offset = first_difference(scenario.payload, decoded)
        if offset is not None:
            return ScenarioResult.fail(
                FailureKind.output_mismatch,
                f"output differs from payload at offset {offset} ({len(decoded)} vs {len(scenario.payload)} bytes)",
                offset=offset,
                output=output,
                closed_exactly_once=closed_exactly_once,
            )
        if not closed_exactly_once:
            return ScenarioResult.fail(
                FailureKind.not_closed,
                f"underlying resource not closed exactly once: {adapter.tracker!r}",
                output=output,
            )
        return ScenarioResult.ok(output)

    def _error_result(self, scenario: Scenario, adapter: Optional[AnyAdapter], ex: Exception) -> ScenarioResult:
        output = adapter.output() if adapter is not None else b""
        closed_exactly_once = adapter.tracker.was_closed_exactly_once() if adapter is not None else False
        if scenario.expected_error is not None and isinstance(ex, scenario.expected_error):
            return ScenarioResult.ok(output, closed_exactly_once=closed_exactly_once, diagnostic=f"expected error: {ex}")
        return self.failure_from_error(ex, output=output, closed_exactly_once=closed_exactly_once)

    @staticmethod
    def failure_from_error(ex: BaseException, *, output: bytes = b"", closed_exactly_once: bool = False) -> ScenarioResult:
        failure = FailureKind.unexpected_error
        offset = None
        if isinstance(ex, UsedAfterCloseError):
            failure = FailureKind.used_after_close
        elif isinstance(ex, DoubleCloseError):
            failure = FailureKind.double_close
        elif isinstance(ex, OutputMismatchError):
            failure = FailureKind.output_mismatch
            offset = ex.offset
        elif isinstance(ex, ScenarioTimeoutError):
            failure = FailureKind.timeout
        elif not isinstance(ex, UnexpectedTransformError):
            ex = UnexpectedTransformError(f"{ex.__class__.__name__}: {ex}")
        return ScenarioResult.fail(
            failure, str(ex), offset=offset, output=output, closed_exactly_once=closed_exactly_once
        )

    # Entry points

    def start_sync_drive(
        self, scenario: Scenario, algorithm: Algorithm, adapter: IOAdapter, input_stream: InputStream
    ) -> Tuple[threading.Thread, asyncio.Future[ScenarioResult]]:
        """Drive a synchronous adapter on a thread of its own.

        The returned future is completed from the thread once the drive is done. A
        thread that outlives its timeout is abandoned: it is a daemon thread, so it
        never blocks interpreter shutdown, and once its loop is gone the result is dropped.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[ScenarioResult] = loop.create_future()

        def complete(result: Optional[ScenarioResult], error: Optional[BaseException]) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)  # type: ignore[arg-type]

        def drive() -> None:
            result, error = None, None
            try:
                result = self._drive_sync(scenario, algorithm, adapter, input_stream)
            except BaseException as ex:  # pylint: disable=broad-except
                error = ex
            try:
                loop.call_soon_threadsafe(complete, result, error)
            except RuntimeError:
                LOG.debug("Dropping result of abandoned scenario %s", scenario)

        thread = threading.Thread(target=drive, name=f"compmatrix-drive {scenario}", daemon=True)
        thread.start()
        return thread, future

    async def arun(self, scenario: Scenario) -> ScenarioResult:
        """Run one scenario to completion; never raises for scenario failures"""
        LOG.debug("Running scenario %s", scenario)
        start = time.monotonic()
        try:
            algorithm, adapter, input_stream = self._setup(scenario)
            if isinstance(adapter, AsyncIOAdapter):
                result = await asyncio.wait_for(
                    self._drive_async(scenario, algorithm, adapter, input_stream), self.timeout
                )
            else:
                _, future = self.start_sync_drive(scenario, algorithm, adapter, input_stream)
                result = await asyncio.wait_for(future, self.timeout)
        except asyncio.TimeoutError:
            timeout_error = ScenarioTimeoutError(f"scenario did not complete within {self.timeout}s")
            result = self.failure_from_error(timeout_error)
        except Exception as ex:  # pylint: disable=broad-except
            result = self._error_result(scenario, None, ex)
        return replace(result, duration=time.monotonic() - start)

    def run(self, scenario: Scenario) -> ScenarioResult:
        return asyncio.run(self.arun(scenario))

    async def arun_all(self, scenarios: Iterable[Scenario]) -> MatrixReport:
        scenarios = list(scenarios)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run_one(scenario: Scenario) -> ScenarioResult:
            async with semaphore:
                result = await self.arun(scenario)
            self.notifier.scenario_finished(scenario.scenario_id, result)
            return result

        results = await asyncio.gather(*(run_one(scenario) for scenario in scenarios))
        report = MatrixReport([(scenario.scenario_id, result) for scenario, result in zip(scenarios, results)])
        self.notifier.matrix_finished(report)
        return report

    def run_all(self, scenarios: Iterable[Scenario]) -> MatrixReport:
        return asyncio.run(self.arun_all(scenarios))


def run_matrix(
    config: Optional[MatrixConfig] = None,
    *,
    registry: AlgorithmRegistry = DEFAULT_REGISTRY,
    adapters: Optional[IOAdapterSet] = None,
    notifier: Optional[ResultNotifier] = None,
) -> MatrixReport:
    config = config or MatrixConfig()
    matrix = ScenarioMatrix(config, registry)
    runner = CaseRunner.from_config(config, registry=registry, adapters=adapters, notifier=notifier)
    return runner.run_all(matrix)
