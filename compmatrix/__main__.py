"""compmatrix - run the scenario matrix from the command line

Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
See LICENSE for details
"""
from .common.models import AlgorithmId, ChunkingStrategy, IOKind, MatrixConfig
from .errors import InvalidConfigurationError
from .factory import get_matrix_config
from .matrix import run_matrix
from .notifier.logger import LoggerNotifier
from typing import Any, Dict, Optional, Sequence

import argparse
import logging
import sys


def build_config(args: argparse.Namespace) -> MatrixConfig:
    config: Dict[str, Any] = {
        "include_malformed": args.malformed,
        "max_concurrency": args.concurrency,
        "timeout": args.timeout,
        "double_finalize": args.double_finalize,
    }
    if args.algorithm:
        config["algorithms"] = [AlgorithmId.parse(value) for value in args.algorithm]
    if args.io_kind:
        config["io_kinds"] = [IOKind.parse(value) for value in args.io_kind]
    if args.strategy:
        config["strategies"] = [ChunkingStrategy.parse(value) for value in args.strategy]
    return get_matrix_config(config)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser("compmatrix", description="Run the streaming codec scenario matrix")
    parser.add_argument("--algorithm", action="append", help="algorithm to include, may be repeated")
    parser.add_argument("--io-kind", action="append", help="I/O abstraction to include, may be repeated")
    parser.add_argument("--strategy", action="append", help="chunking strategy to include, may be repeated")
    parser.add_argument("--concurrency", type=int, default=MatrixConfig().max_concurrency)
    parser.add_argument("--timeout", type=float, default=MatrixConfig().timeout, help="per scenario, in seconds")
    parser.add_argument("--malformed", action="store_true", help="add truncated-input scenarios")
    parser.add_argument("--double-finalize", action="store_true", help="finalize every scenario twice")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s\t%(name)s\t%(levelname)s\t%(message)s",
    )
    log = logging.getLogger("compmatrix")
    try:
        config = build_config(args)
    except InvalidConfigurationError as ex:
        parser.error(str(ex))
    report = run_matrix(config, notifier=LoggerNotifier(log))
    for scenario_id, result in report.failures():
        print(f"FAIL {scenario_id}: {result.failure}: {result.diagnostic}")
    print(report.summary())
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
