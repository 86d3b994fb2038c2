"""Pull a canonical status code out of arbitrary exceptions."""

from typing import Optional


def extract_error_code(error: BaseException) -> Optional[str]:
    """
    Return the normalized status code carried by ``error``, if any.

    Library errors expose ``code``; provider SDK errors often use ``code`` with
    a service prefix (``firestore/unavailable``, ``auth/user-disabled``) or
    upper-case gRPC names (``PERMISSION_DENIED``).
    """
    raw = getattr(error, "code", None)
    if not isinstance(raw, str) or not raw:
        return None
    code = raw.rsplit("/", 1)[-1]
    return code.strip().lower().replace("_", "-")


def extract_error_message(error: BaseException) -> str:
    message = str(error)
    if message:
        return message
    return error.__class__.__name__
