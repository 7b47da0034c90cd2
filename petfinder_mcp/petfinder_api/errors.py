"""Exceptions raised by the Petfinder API layer."""

from __future__ import annotations

from typing import Any, Optional

import httpx


class CredentialsMissingError(Exception):
    """Raised before any cache lookup or network call when credentials are incomplete."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(
            message
            or "Missing Petfinder credentials. Provide x-petfinder-client-id and "
            "x-petfinder-client-secret headers."
        )


class PetfinderApiError(Exception):
    """Base exception for Petfinder API errors."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        status_text: Optional[str] = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.status_text = status_text
        self.body = body


class UpstreamAuthError(PetfinderApiError):
    """Raised when the OAuth token endpoint rejects a client-credentials exchange."""


class UpstreamAPIError(PetfinderApiError):
    """Raised when a Petfinder API endpoint answers with a non-2xx status."""


class UpstreamUnreachableError(PetfinderApiError):
    """Raised when Petfinder cannot be reached at all."""


def read_error_body(response: httpx.Response) -> Any:
    """Return the response body as parsed JSON when possible, else raw text."""
    try:
        return response.json()
    except ValueError:
        return response.text
