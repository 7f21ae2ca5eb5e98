from __future__ import annotations

from typing import Any, Protocol, TYPE_CHECKING, Union

import mmap

if TYPE_CHECKING:
    from array import array

BinaryData = Union[
    bytes,
    bytearray,
    memoryview,
    "array[Any]",
    mmap.mmap,
]


class HasRead(Protocol):
    def read(self, n: int = -1, /) -> bytes:
        ...


class HasWrite(Protocol):
    def write(self, data: BinaryData) -> int:
        ...


class HasClose(Protocol):
    def close(self) -> None:
        ...


class Readable(HasRead, HasClose, Protocol):
    pass


class Writable(HasWrite, HasClose, Protocol):
    def flush(self) -> None:
        ...


class AsyncReadable(Protocol):
    async def read(self, n: int = -1, /) -> bytes:
        ...

    async def aclose(self) -> None:
        ...


class AsyncWritable(Protocol):
    async def write(self, data: BinaryData) -> int:
        ...

    async def flush(self) -> None:
        ...

    async def aclose(self) -> None:
        ...


class Compressor(Protocol):
    def compress(self, data: bytes) -> bytes:
        ...

    def flush(self) -> bytes:
        ...


class Decompressor(Protocol):
    def decompress(self, data: bytes) -> bytes:
        ...


class Transformer(Protocol):
    finished: bool

    def process(self, data: bytes) -> bytes:
        ...

    def finish(self) -> bytes:
        ...
