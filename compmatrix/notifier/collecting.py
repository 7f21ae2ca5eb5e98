# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/

from __future__ import annotations

from .interface import ResultNotifier
from typing import List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from compmatrix.matrix import MatrixReport, ScenarioResult


class CollectingNotifier(ResultNotifier):
    """Keeps every result in memory, in the order scenarios finished"""

    def __init__(self) -> None:
        self.results: List[Tuple[str, ScenarioResult]] = []
        self.report: Optional[MatrixReport] = None

    def scenario_finished(self, scenario_id: str, result: ScenarioResult) -> None:
        self.results.append((scenario_id, result))

    def matrix_finished(self, report: MatrixReport) -> None:
        self.report = report
