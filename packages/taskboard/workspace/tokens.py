"""Token utilities for invitation links."""

from __future__ import annotations

import base64
import secrets
from typing import Callable

__all__ = ["TokenGenerator", "DEFAULT_TOKEN_BYTES", "urlsafe_encode", "generate_invitation_token"]

DEFAULT_TOKEN_BYTES = 32

TokenGenerator = Callable[[], str]


def urlsafe_encode(raw: bytes) -> str:
    """Encode *raw* as unpadded base64-url text."""

    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def generate_invitation_token(num_bytes: int = DEFAULT_TOKEN_BYTES) -> str:
    """Generate a cryptographically secure, URL-safe invitation token."""

    if num_bytes <= 0:
        raise ValueError("num_bytes must be positive")
    return urlsafe_encode(secrets.token_bytes(num_bytes))
