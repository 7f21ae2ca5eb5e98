from typing import Final

IO_BLOCK_SIZE: Final[int] = 2**20

# Chunking defaults; small enough that even the short sample payloads get split
DEFAULT_FIXED_BLOCK_SIZE: Final[int] = 7
DEFAULT_RANDOM_SEED: Final[int] = 0x5EED
DEFAULT_MAX_FRAGMENT: Final[int] = 17

DEFAULT_READ_SIZE: Final[int] = 64 * 1024
DEFAULT_SCENARIO_TIMEOUT: Final[float] = 30.0
DEFAULT_CONCURRENCY: Final[int] = 8

SAMPLE_BYTES: Final[bytes] = b"Some contents"
