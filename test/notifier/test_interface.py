"""Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/"""
from compmatrix.matrix import MatrixReport, ScenarioResult
from compmatrix.notifier.collecting import CollectingNotifier
from compmatrix.notifier.interface import ResultNotifier
from compmatrix.notifier.null import NullNotifier


class _TestNotifier(ResultNotifier):
    def __init__(self) -> None:
        super().__init__()
        self.scenario_finished_called = 0

    def scenario_finished(self, scenario_id: str, result: ScenarioResult) -> None:
        self.scenario_finished_called += 1


def test_interface() -> None:
    test = _TestNotifier()

    assert test.scenario_finished_called == 0
    test.scenario_finished("test_interface", ScenarioResult.ok())
    assert test.scenario_finished_called == 1

    # default implementations do nothing
    test.matrix_finished(MatrixReport())
    test.close()
    assert test.scenario_finished_called == 1


def test_null_notifier() -> None:
    notifier = NullNotifier()
    notifier.scenario_finished("x", ScenarioResult.ok())
    notifier.matrix_finished(MatrixReport())
    notifier.close()


def test_collecting_notifier() -> None:
    notifier = CollectingNotifier()
    result = ScenarioResult.ok(b"abc")
    notifier.scenario_finished("x", result)
    report = MatrixReport([("x", result)])
    notifier.matrix_finished(report)
    assert notifier.results == [("x", result)]
    assert notifier.report is report
