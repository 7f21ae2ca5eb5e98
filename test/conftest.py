from compmatrix.algos import AlgorithmRegistry
from compmatrix.common.models import AlgorithmId
from compmatrix.matrix import CaseRunner

import pytest

ALL_ALGORITHMS = list(AlgorithmId)


@pytest.fixture(name="registry")
def fixture_registry() -> AlgorithmRegistry:
    return AlgorithmRegistry()


@pytest.fixture(name="runner")
def fixture_runner(registry: AlgorithmRegistry) -> CaseRunner:
    return CaseRunner(registry, timeout=10.0, max_concurrency=4)
