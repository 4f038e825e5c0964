"""Error taxonomy for review and chat calls.

Every failure of the generative-text backend surfaces as one of the
ReviewError subclasses below. ``status_code`` is the HTTP status the server
answers with; ``code`` is a stable machine-readable kind.

Nothing in codepolish_core retries. A failed attempt fails the operation and
the caller decides whether to resubmit.
"""

from __future__ import annotations


class ReviewError(Exception):
    status_code: int = 502
    code: str = "upstream_error"


class ValidationError(ReviewError, ValueError):
    """Bad caller input (empty code, unknown option value, bad transcript)."""

    status_code = 400
    code = "validation_error"


class MissingCredentialsError(ReviewError):
    """No API key is configured for the selected provider."""

    status_code = 500
    code = "missing_credentials"


class AuthError(ReviewError):
    """The provider rejected the configured API key."""

    code = "auth_error"


class SafetyBlockedError(ReviewError):
    """The provider refused the content on policy grounds."""

    status_code = 422
    code = "safety_blocked"


class RateLimitError(ReviewError):
    """Quota exhausted or requests throttled. Wait and resubmit."""

    status_code = 429
    code = "rate_limited"


class MalformedResponseError(ReviewError):
    """The provider answered, but not with the declared JSON schema."""

    code = "malformed_response"


class EmptyResponseError(ReviewError):
    """The provider answered with no payload at all."""

    code = "empty_response"


class UpstreamError(ReviewError):
    """Any other provider failure (network, 5xx, unexpected SDK error)."""


_AUTH_STATUSES = {401, 403}
_RATE_LIMIT_STATUSES = {429}


def _status_of(exc: BaseException) -> int | None:
    # google-genai APIError exposes ``code``; openai/anthropic APIStatusError
    # expose ``status_code``.
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def classify_upstream_error(exc: BaseException) -> ReviewError:
    """Map an SDK exception onto the taxonomy.

    Structured HTTP status wins when the SDK exposes one. The substring
    checks are a best-effort fallback for errors that carry only a message.
    """
    status = _status_of(exc)
    message = str(exc) or exc.__class__.__name__
    lowered = message.lower()

    if status in _AUTH_STATUSES:
        return AuthError("Invalid API key configuration. Please check your environment variables.")
    if status in _RATE_LIMIT_STATUSES:
        return RateLimitError("API quota exceeded or too many requests. Please wait a moment before trying again.")

    if "api key" in lowered or "api_key" in lowered or "permission_denied" in lowered:
        return AuthError("Invalid API key configuration. Please check your environment variables.")
    if "safety" in lowered or "blocked" in lowered:
        return SafetyBlockedError(
            "The code review was blocked by safety filters. Please ensure your code follows safety guidelines."
        )
    if "quota" in lowered or "429" in lowered or "resource_exhausted" in lowered or "rate limit" in lowered:
        return RateLimitError("API quota exceeded or too many requests. Please wait a moment before trying again.")

    return UpstreamError(message)
