# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
# See LICENSE for details
"""compmatrix - exception classes"""

from typing import Optional


class Error(Exception):
    """Generic exception"""


class HarnessError(Error):
    """A scenario violated the streaming contract"""


class UsedAfterCloseError(HarnessError):
    """Read, write or flush was attempted on an already closed resource"""


class DoubleCloseError(HarnessError):
    """Close was invoked on a resource that was already closed"""


class OutputMismatchError(HarnessError):
    """Produced output differs from the reference output"""

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        self.offset = offset
        super().__init__(message)


class UnexpectedTransformError(HarnessError):
    """The algorithm raised an error the scenario did not declare as expected"""


class ScenarioTimeoutError(HarnessError):
    """A scenario did not complete within the configured time bound"""


class UninitializedError(Error):
    """Error trying to access an uninitialized resource"""


class CodecError(Error):
    """Compression or decompression failed"""


class TruncatedStreamError(CodecError):
    """Compressed input ended before the end-of-stream marker"""


class InvalidConfigurationError(Error):
    """Invalid configuration"""


class MissingLibraryError(Exception):
    """Missing dependency library"""
