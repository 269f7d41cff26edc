import hmac

BEARER_PREFIX = "Bearer "


def bearer_header(secret: str) -> str:
    """Format the authorization header value for the shared ingest secret."""
    return f"{BEARER_PREFIX}{secret}"


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` value, or None."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    return authorization[len(BEARER_PREFIX) :]


def is_authorized(authorization: str | None, secret: str | None) -> bool:
    """Check a bearer header against the shared secret in constant time.

    An unset secret never authorizes anything.
    """
    if not secret:
        return False
    token = extract_bearer_token(authorization)
    if token is None:
        return False
    return hmac.compare_digest(token.encode(), secret.encode())
