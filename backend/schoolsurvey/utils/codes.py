"""Registration codes handed out to school admins and teachers."""

from __future__ import annotations

import uuid


def _code(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}".upper()


def generate_admin_code() -> str:
    """Return a fresh admin code such as `ADM-1A2B3C4D`."""
    return _code("ADM")


def generate_teacher_code() -> str:
    """Return a fresh teacher code such as `TCH-1A2B3C4D`."""
    return _code("TCH")
