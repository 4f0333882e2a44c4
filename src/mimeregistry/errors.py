"""Error types raised by mimeregistry.

Every library error carries an ``ErrorCode`` so callers (and the CLI) can
branch on a stable identifier instead of on message text.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    INVALID_CONTENT_TYPE = "INVALID_CONTENT_TYPE"
    INVALID_ENCODING = "INVALID_ENCODING"
    DATA_SOURCE_ERROR = "DATA_SOURCE_ERROR"


class MimeRegistryError(Exception):
    """Base class for all mimeregistry errors."""

    def __init__(self, code: ErrorCode, message: str, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

    def to_dict(self) -> dict[str, object]:
        return {
            "error": {
                "code": str(self.code),
                "message": self.message,
                "recoverable": self.recoverable,
            }
        }


class InvalidContentType(MimeRegistryError, ValueError):
    """A content type string that is not ``media/subtype``."""

    def __init__(self, type_string: object) -> None:
        super().__init__(ErrorCode.INVALID_CONTENT_TYPE, f"Invalid Content-Type {type_string!r}")
        self.type_string = type_string


class InvalidEncoding(MimeRegistryError, ValueError):
    """An encoding outside base64, 8bit, 7bit and quoted-printable."""

    def __init__(self, encoding: object) -> None:
        super().__init__(ErrorCode.INVALID_ENCODING, f"Invalid Encoding {encoding!r}")
        self.encoding = encoding


class DataSourceError(MimeRegistryError):
    """The type data file is missing, unreadable, or holds invalid records."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.DATA_SOURCE_ERROR, message)
