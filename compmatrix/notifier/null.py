# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/

from __future__ import annotations

from .interface import ResultNotifier
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from compmatrix.matrix import ScenarioResult


class NullNotifier(ResultNotifier):
    """Empty implementation.

    Used by default if configuration is missing to avoid None checks
    """

    def scenario_finished(self, scenario_id: str, result: ScenarioResult) -> None:
        pass
