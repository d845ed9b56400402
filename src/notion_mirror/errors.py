"""Exception hierarchy for the Notion mirror."""

from __future__ import annotations

from typing import Optional


class NotionMirrorError(Exception):
    """Base class for all errors raised by the mirror."""


class ConfigError(NotionMirrorError):
    """Raised when required configuration is missing or invalid."""


class NotionAPIError(NotionMirrorError):
    """Raised when the Notion API answers with an error payload."""

    def __init__(self, status_code: int, message: str, *, code: Optional[str] = None) -> None:
        detail = f"{code}: {message}" if code else message
        super().__init__(f"Notion API error {status_code} ({detail})")
        self.status_code = status_code
        self.code = code
        self.message = message


class ContentConversionError(NotionMirrorError):
    """Raised when a page body cannot be rendered to Markdown."""

    def __init__(self, page_id: str, reason: str) -> None:
        super().__init__(f"Failed to convert page {page_id}: {reason}")
        self.page_id = page_id
        self.reason = reason


class MaterializationError(NotionMirrorError):
    """Raised when a page cannot be written to the output tree."""

    def __init__(self, page_id: str, reason: str) -> None:
        super().__init__(f"Failed to materialize page {page_id}: {reason}")
        self.page_id = page_id
        self.reason = reason
