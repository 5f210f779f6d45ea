"""
Custom exceptions for html_navigator.

Error philosophy:
  - Malformed markup  → NEVER raised: the engine recovers and returns a best-effort tree.
  - Missing targets   → NEVER raised: lookups return None or an empty NodeList.
  - DocumentMissingError → FAIL HARD: markup was requested from a Node with no backing.
  - EngineError       → only visible to direct engine callers; Node absorbs it.

Keeping "not found" out of the exception path means callers can chain lookups
(node.get_by_id("x").get_text()) after a single None check instead of wrapping
every step in try/except.
"""

from typing import Optional


class HTMLNavigatorError(Exception):
    """Base exception for all html_navigator errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- FAIL HARD: the calling operation cannot produce a value ---

class DocumentMissingError(HTMLNavigatorError):
    """
    Raised when markup is requested from a Node that has neither raw text
    nor a parsed document to serialize.
    """
    pass


# --- Engine-level: converted into an empty tree before it reaches a Node ---

class EngineError(HTMLNavigatorError):
    """Raised when libxml2 cannot build any tree from the given markup."""

    def __init__(
        self,
        message: str,
        markup_preview: str = "",
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        # First characters of the offending input, for log correlation
        self.markup_preview = markup_preview
