"""Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from compmatrix.matrix import MatrixReport, ScenarioResult


class ResultNotifier(ABC):
    """This interface allows external code to be notified about scenario outcomes."""

    @abstractmethod
    def scenario_finished(self, scenario_id: str, result: ScenarioResult) -> None:
        """Called once for every scenario, in completion order."""

    def matrix_finished(self, report: MatrixReport) -> None:
        """Called once after every scenario of a run has finished.

        Note: results in `report` are in enumeration order, which may differ
        from the order `scenario_finished` was called in when scenarios run
        concurrently.
        """

    def close(self) -> None:
        """Method used to clean resources of the notifier, if any."""
