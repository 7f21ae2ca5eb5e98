# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/

from __future__ import annotations

from .interface import ResultNotifier
from logging import Logger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from compmatrix.matrix import MatrixReport, ScenarioResult


class LoggerNotifier(ResultNotifier):
    def __init__(self, log: Logger) -> None:
        self._log = log

    def scenario_finished(self, scenario_id: str, result: ScenarioResult) -> None:
        if result.passed:
            self._log.info("PASS %s (%.3fs)", scenario_id, result.duration)
        else:
            self._log.warning("FAIL %s: %s: %s", scenario_id, result.failure, result.diagnostic)

    def matrix_finished(self, report: MatrixReport) -> None:
        if report.ok:
            self._log.info("Matrix finished: %s", report.summary())
        else:
            self._log.error("Matrix finished: %s", report.summary())
