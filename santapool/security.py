from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken
from flask import current_app


class AssignmentTokenError(ValueError):
    """A stored recipient token no longer decrypts (key rotated or data tampered with)."""


def _assignment_fernet() -> Fernet:
    # ASSIGNMENT_ENC_KEY is a urlsafe base64 32-byte key; without one the key
    # is derived from SECRET_KEY, so rotating SECRET_KEY orphans drawn pools.
    explicit = (current_app.config.get("ASSIGNMENT_ENC_KEY") or "").strip()
    if explicit:
        return Fernet(explicit.encode("utf-8"))

    secret = (current_app.config.get("SECRET_KEY") or "").encode("utf-8")
    digest = hashlib.sha256(b"santapool-assignments|" + secret).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def encrypt_assignment_recipient(receiver_id: str) -> str:
    return _assignment_fernet().encrypt(str(receiver_id).encode("utf-8")).decode("utf-8")


def decrypt_assignment_recipient(token: str) -> str:
    """Recipient id stored in ``token``. Raises AssignmentTokenError when it cannot be read."""
    try:
        return _assignment_fernet().decrypt(token.encode("utf-8")).decode("utf-8")
    except (InvalidToken, ValueError, TypeError) as e:
        raise AssignmentTokenError("Invalid assignment token") from e
