"""Security configuration constants for the Genetics Library API.

This module centralizes security-related configuration including:
- Sensitive keys that should be sanitized from logs
- Error response fields allowed per environment
"""

# These keys are redacted from structured logs. Free-text seed descriptions
# are user content too, so `message` and `previous_context` are included.
SENSITIVE_KEYS: set[str] = {
    # Authentication & Authorization
    "password",
    "secret",
    "token",
    "authorization",
    "api_key",
    "jwt",
    "session_id",
    "bearer",
    "connection_string",
    # Personal data
    "email",
    "phone",
    "address",
    # User-authored content
    "message",
    "previous_context",
    # Headers
    "set-cookie",
    "cookie",
    "x-api-key",
}

# In production, error responses should only contain these fields
PRODUCTION_ERROR_FIELDS: set[str] = {
    "correlation_id",
    "type",
}

DEVELOPMENT_ERROR_FIELDS: set[str] = PRODUCTION_ERROR_FIELDS | {
    "details",
    "traceback",
    "exception_type",
    "validation_errors",
}


def get_allowed_error_fields(environment: str) -> set[str]:
    """Get allowed error response fields based on environment."""
    if environment == "production":
        return PRODUCTION_ERROR_FIELDS.copy()
    return DEVELOPMENT_ERROR_FIELDS.copy()


def is_sensitive_key(key: str) -> bool:
    """Check if a key should be considered sensitive and redacted.

    Matching is substring based and case-insensitive, so `user_email` and
    `X-Auth-Token` are both caught.
    """
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in SENSITIVE_KEYS)
