# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/

from .common.models import MatrixConfig
from .errors import InvalidConfigurationError
from .matrix import CaseRunner, ScenarioMatrix
from .notifier.interface import ResultNotifier
from typing import Any, Dict, Optional, Tuple, Type

import logging
import pydantic

NOTIFIER_TYPE = "notifier_type"
Config = Dict[str, Any]


def get_class_for_notifier(notifier_config: Config) -> Type[ResultNotifier]:
    notifier_type = notifier_config[NOTIFIER_TYPE]
    if notifier_type == "logger":
        from .notifier.logger import LoggerNotifier

        return LoggerNotifier
    elif notifier_type == "null":
        from .notifier.null import NullNotifier

        return NullNotifier
    elif notifier_type == "collecting":
        from .notifier.collecting import CollectingNotifier

        return CollectingNotifier
    raise InvalidConfigurationError(f"unsupported notifier type {repr(notifier_type)}")


def get_notifier(notifier_config: Config) -> ResultNotifier:
    notifier_class = get_class_for_notifier(notifier_config)
    notifier_config = notifier_config.copy()
    notifier_config.pop(NOTIFIER_TYPE)
    if notifier_config.get("log") is None and notifier_class.__name__ == "LoggerNotifier":
        notifier_config["log"] = logging.getLogger(notifier_config.pop("logger_name", "compmatrix"))
    return notifier_class(**notifier_config)


def get_matrix_config(matrix_config: Config) -> MatrixConfig:
    try:
        return MatrixConfig(**matrix_config)
    except pydantic.ValidationError as ex:
        raise InvalidConfigurationError(f"invalid matrix configuration: {ex}") from ex


def get_case_runner(config: Config, notifier: Optional[ResultNotifier] = None) -> Tuple[ScenarioMatrix, CaseRunner]:
    """Build the matrix and runner described by a plain dict, with an optional `notifier` section"""
    config = config.copy()
    notifier_config = config.pop("notifier", None)
    if notifier is None and notifier_config is not None:
        notifier = get_notifier(notifier_config)
    model = get_matrix_config(config)
    return ScenarioMatrix(model), CaseRunner.from_config(model, notifier=notifier)
