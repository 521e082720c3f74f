"""Deterministic identifier helpers."""

import hashlib


def stable_id(*parts: str, prefix: str = "", length: int = 16) -> str:
    """
    Build an identifier that depends only on its inputs.

    Args:
        parts: Strings hashed in the given order
        prefix: Optional prefix prepended to the digest
        length: Number of hex characters kept from the digest

    Returns:
        prefix followed by the truncated sha1 hex digest
    """
    digest = hashlib.sha1("\x1f".join(parts).encode("utf-8")).hexdigest()
    return f"{prefix}{digest[:length]}"
