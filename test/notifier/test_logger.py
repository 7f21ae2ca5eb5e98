# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
from compmatrix.matrix import FailureKind, MatrixReport, ScenarioResult
from compmatrix.notifier.logger import LoggerNotifier
from pytest import LogCaptureFixture

import logging


def test_logger_notifier_scenario_passed(caplog: LogCaptureFixture) -> None:
    notifier = LoggerNotifier(logging.getLogger())

    with caplog.at_level(logging.DEBUG):
        assert len(caplog.messages) == 0
        notifier.scenario_finished("gzip / sink / whole / p [encode]", ScenarioResult.ok(b"x"))
        assert len(caplog.messages) == 1
        assert caplog.records[0].levelno == logging.INFO
        assert "PASS gzip / sink / whole / p [encode]" in caplog.messages[0]


def test_logger_notifier_scenario_failed(caplog: LogCaptureFixture) -> None:
    notifier = LoggerNotifier(logging.getLogger())
    result = ScenarioResult.fail(FailureKind.output_mismatch, "differs at offset 4", offset=4)

    with caplog.at_level(logging.DEBUG):
        notifier.scenario_finished("zstd / stream / whole / p [decode]", result)
        assert len(caplog.messages) == 1
        assert caplog.records[0].levelno == logging.WARNING
        assert "OutputMismatch" in caplog.messages[0]
        assert "differs at offset 4" in caplog.messages[0]


def test_logger_notifier_matrix_finished(caplog: LogCaptureFixture) -> None:
    notifier = LoggerNotifier(logging.getLogger())
    report = MatrixReport(
        [
            ("a", ScenarioResult.ok()),
            ("b", ScenarioResult.fail(FailureKind.timeout, "slow")),
        ]
    )

    with caplog.at_level(logging.DEBUG):
        notifier.matrix_finished(report)
        assert len(caplog.messages) == 1
        assert caplog.records[0].levelno == logging.ERROR
        assert "2 scenarios, 1 passed, 1 failed" in caplog.messages[0]

    caplog.clear()
    with caplog.at_level(logging.DEBUG):
        notifier.matrix_finished(MatrixReport([("a", ScenarioResult.ok())]))
        assert caplog.records[0].levelno == logging.INFO
