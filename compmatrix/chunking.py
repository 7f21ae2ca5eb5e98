# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
# See LICENSE for details
"""compmatrix - chunking strategies

Every strategy is a pure function from a payload to an ordered list of
fragments whose concatenation is the payload itself.
"""

from __future__ import annotations

from .common.constants import DEFAULT_FIXED_BLOCK_SIZE, DEFAULT_MAX_FRAGMENT, DEFAULT_RANDOM_SEED
from .common.models import ChunkingParams, ChunkingStrategy
from .errors import InvalidConfigurationError
from typing import Any, Callable, Dict, List, Optional

import random

Splitter = Callable[..., List[bytes]]


def whole(payload: bytes) -> List[bytes]:
    # a zero-byte payload is delivered as no fragments at all
    return [payload] if payload else []


def byte_at_a_time(payload: bytes) -> List[bytes]:
    return [payload[i : i + 1] for i in range(len(payload))]


def fixed_blocks(payload: bytes, block_size: int = DEFAULT_FIXED_BLOCK_SIZE) -> List[bytes]:
    if block_size < 1:
        raise InvalidConfigurationError(f"block_size must be at least one, got {block_size!r}")
    return [payload[i : i + block_size] for i in range(0, len(payload), block_size)]


def seeded_random(
    payload: bytes, seed: int = DEFAULT_RANDOM_SEED, max_fragment: int = DEFAULT_MAX_FRAGMENT
) -> List[bytes]:
    """Uneven split driven by a private RNG; zero-sized fragments are allowed."""
    if max_fragment < 1:
        raise InvalidConfigurationError(f"max_fragment must be at least one, got {max_fragment!r}")
    rng = random.Random(seed)
    fragments = []
    offset = 0
    while offset < len(payload):
        size = rng.randint(0, max_fragment)
        fragments.append(payload[offset : offset + size])
        offset += size
    return fragments


def trailing_empty(payload: bytes) -> List[bytes]:
    return [payload, b""] if payload else [b""]


STRATEGIES: Dict[ChunkingStrategy, Splitter] = {
    ChunkingStrategy.whole: whole,
    ChunkingStrategy.byte_at_a_time: byte_at_a_time,
    ChunkingStrategy.fixed_blocks: fixed_blocks,
    ChunkingStrategy.seeded_random: seeded_random,
    ChunkingStrategy.trailing_empty: trailing_empty,
}


def strategy_params(
    strategy: ChunkingStrategy, params: ChunkingParams, max_block_size: Optional[int] = None
) -> Dict[str, Any]:
    """Select the parameters from `params` that apply to `strategy`.

    `max_block_size` is an algorithm edge parameter capping the fixed block size.
    """
    if strategy == ChunkingStrategy.fixed_blocks:
        block_size = params.block_size
        if max_block_size is not None:
            block_size = min(block_size, max_block_size)
        return {"block_size": block_size}
    if strategy == ChunkingStrategy.seeded_random:
        return {"seed": params.seed, "max_fragment": params.max_fragment}
    return {}


def split(payload: bytes, strategy: ChunkingStrategy | str, **params: Any) -> List[bytes]:
    if not isinstance(strategy, ChunkingStrategy):
        strategy = ChunkingStrategy.parse(strategy)
    return STRATEGIES[strategy](bytes(payload), **params)
