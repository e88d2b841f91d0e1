"""
Shared-secret password check used by the UI login gate.

This is a single equality test against a server-held secret. It issues no
token and protects no other endpoint; the client decides what to show.
"""

from __future__ import annotations

import secrets
from typing import Optional


def check_password(candidate: Optional[str], secret: Optional[str]) -> bool:
    """
    Compare a submitted password with the configured secret.

    An unset or empty secret never matches, so a server started without
    ``AUTH_PASSWORD`` rejects every login.
    """
    if not candidate or not secret:
        return False
    return secrets.compare_digest(candidate.encode("utf-8"), secret.encode("utf-8"))
