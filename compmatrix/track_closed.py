# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
# See LICENSE for details
"""compmatrix - close tracking wrappers

Codec implementations must finalize and release the resource they wrap with
exactly one close. These wrappers sit between a codec and its underlying
resource and turn a missing close, a second close or use after close into
something a test can assert on.
"""

from __future__ import annotations

from .errors import DoubleCloseError, UsedAfterCloseError
from .typing import BinaryData
from types import TracebackType
from typing import Any, Generic, Optional, Type, TypeVar

import logging

LOG = logging.getLogger(__name__)

T = TypeVar("T")


class _CloseTracker(Generic[T]):
    def __init__(self, inner: T) -> None:
        self._inner = inner
        self.close_count = 0
        self.closed = False

    def get_ref(self) -> T:
        """Access the wrapped object, e.g. to collect the output after close"""
        return self._inner

    def _check_not_closed(self, operation: str) -> None:
        if self.closed:
            raise UsedAfterCloseError(f"{operation} called on {self._inner!r} after close")

    def _check_close_allowed(self) -> None:
        if self.closed:
            # leave counters untouched, the rejected call is reported by the exception only
            raise DoubleCloseError(f"close called again on {self._inner!r}")
        self.close_count += 1

    def was_closed_exactly_once(self) -> bool:
        return self.closed and self.close_count == 1

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._inner!r}, close_count={self.close_count}, closed={self.closed})"


class TrackClosed(_CloseTracker[T]):
    """Forwards read/write/flush/close to the wrapped object while counting closes"""

    def read(self, size: Optional[int] = -1) -> bytes:
        self._check_not_closed("read")
        return self._inner.read(size)  # type: ignore[attr-defined]

    def write(self, data: BinaryData) -> int:
        self._check_not_closed("write")
        return self._inner.write(data)  # type: ignore[attr-defined]

    def flush(self) -> None:
        self._check_not_closed("flush")
        flush = getattr(self._inner, "flush", None)
        if flush is not None:
            flush()

    def readable(self) -> bool:
        self._check_not_closed("readable")
        return hasattr(self._inner, "read")

    def writable(self) -> bool:
        self._check_not_closed("writable")
        return hasattr(self._inner, "write")

    def close(self) -> None:
        self._check_close_allowed()
        self._inner.close()  # type: ignore[attr-defined]
        self.closed = True
        LOG.debug("Closed %r", self._inner)

    def __enter__(self) -> TrackClosed[T]:
        return self

    def __exit__(
        self, exc_type: Optional[Type[BaseException]], exc_val: Optional[BaseException], exc_tb: Optional[TracebackType]
    ) -> None:
        if not self.closed:
            self.close()


class AsyncTrackClosed(_CloseTracker[T]):
    """Asynchronous counterpart of TrackClosed; every forwarded operation is awaited"""

    async def read(self, size: Optional[int] = -1) -> bytes:
        self._check_not_closed("read")
        inner: Any = self._inner
        return await inner.read(size)

    async def write(self, data: BinaryData) -> int:
        self._check_not_closed("write")
        inner: Any = self._inner
        return await inner.write(data)

    async def flush(self) -> None:
        self._check_not_closed("flush")
        flush = getattr(self._inner, "flush", None)
        if flush is not None:
            await flush()

    async def aclose(self) -> None:
        self._check_close_allowed()
        inner: Any = self._inner
        await inner.aclose()
        self.closed = True
        LOG.debug("Closed %r", self._inner)

    async def __aenter__(self) -> AsyncTrackClosed[T]:
        return self

    async def __aexit__(
        self, exc_type: Optional[Type[BaseException]], exc_val: Optional[BaseException], exc_tb: Optional[TracebackType]
    ) -> None:
        if not self.closed:
            await self.aclose()
