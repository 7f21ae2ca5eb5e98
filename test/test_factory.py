from compmatrix.common.models import AlgorithmId, ChunkingStrategy, IOKind
from compmatrix.errors import InvalidConfigurationError
from compmatrix.factory import get_case_runner, get_class_for_notifier, get_matrix_config, get_notifier
from compmatrix.notifier.collecting import CollectingNotifier
from compmatrix.notifier.logger import LoggerNotifier
from compmatrix.notifier.null import NullNotifier

import logging
import pytest


@pytest.mark.parametrize(
    "notifier_type,notifier_class",
    [("logger", LoggerNotifier), ("null", NullNotifier), ("collecting", CollectingNotifier)],
)
def test_get_class_for_notifier(notifier_type: str, notifier_class: type) -> None:
    assert get_class_for_notifier({"notifier_type": notifier_type}) is notifier_class


def test_get_class_for_unknown_notifier() -> None:
    with pytest.raises(InvalidConfigurationError, match="unsupported notifier type 'http'"):
        get_class_for_notifier({"notifier_type": "http"})


def test_get_logger_notifier() -> None:
    log = logging.getLogger("test_factory")
    notifier = get_notifier({"notifier_type": "logger", "log": log})
    assert isinstance(notifier, LoggerNotifier)
    assert notifier._log is log  # pylint: disable=protected-access

    notifier = get_notifier({"notifier_type": "logger"})
    assert notifier._log.name == "compmatrix"  # type: ignore[attr-defined]  # pylint: disable=protected-access


def test_get_matrix_config() -> None:
    config = get_matrix_config(
        {
            "algorithms": ["gzip", "zstd"],
            "io_kinds": ["async-reader"],
            "strategies": ["byte-at-a-time"],
            "chunking": {"block_size": 3},
        }
    )
    assert config.algorithms == [AlgorithmId.gzip, AlgorithmId.zstd]
    assert config.io_kinds == [IOKind.async_reader]
    assert config.strategies == [ChunkingStrategy.byte_at_a_time]
    assert config.chunking.block_size == 3


@pytest.mark.parametrize(
    "config",
    [
        {"algorithms": ["brotli"]},
        {"chunking": {"block_size": 0}},
        {"timeout": -1},
        {"unknown_key": True},
    ],
    ids=["unknown-algorithm", "block-size", "timeout", "extra-key"],
)
def test_get_matrix_config_invalid(config: dict) -> None:
    with pytest.raises(InvalidConfigurationError):
        get_matrix_config(config)


def test_get_case_runner() -> None:
    matrix, runner = get_case_runner(
        {
            "algorithms": ["identity"],
            "io_kinds": ["sink"],
            "strategies": ["whole"],
            "payloads": {"p": b"abc"},
            "read_size": 4,
            "notifier": {"notifier_type": "collecting"},
        }
    )
    assert isinstance(runner.notifier, CollectingNotifier)
    assert runner.read_size == 4
    report = runner.run_all(matrix)
    assert len(report) == 2
    assert report.ok
    assert len(runner.notifier.results) == 2
