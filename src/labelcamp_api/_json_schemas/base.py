from __future__ import annotations

from typing import Optional, Any

import msgspec

# region Base Objects


class ApiBase(msgspec.Struct):
    """
    Base object for all API query returns.
    """
    data: Any = None
    included: list = []
    meta: dict = {}
    links: Optional[dict] = None


class _DataBase(msgspec.Struct):
    """
    Base class for API 'data' field contents (generic attributes dict).
    """
    type: str
    id: str
    attributes: dict = {}
    links: Optional[dict] = None
    relationships: Optional[dict] = None


# endregion

# region Errors


class ErrorSource(msgspec.Struct):
    pointer: Optional[str] = None
    parameter: Optional[str] = None


class ErrorObject(msgspec.Struct):
    # JSON:API error object, all members optional
    status: Optional[str] = None
    code: Optional[str] = None
    title: Optional[str] = None
    detail: Optional[str] = None
    source: Optional[ErrorSource] = None


class ErrorDocument(msgspec.Struct):
    errors: list[ErrorObject] = []
    # OAuth style error bodies
    error: Optional[str] = None
    error_description: Optional[str] = None

    def message(self) -> Optional[str]:
        for e in self.errors:
            text = e.detail or e.title
            if text:
                return text
        return self.error_description or self.error


# endregion

# region OAuth


class TokenResponse(msgspec.Struct):
    access_token: str
    token_type: str = 'Bearer'
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None
    scope: Optional[str] = None
    created_at: Optional[int] = None

# endregion
