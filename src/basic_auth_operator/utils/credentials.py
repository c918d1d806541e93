"""Utilities for generating basic-auth credentials."""

from __future__ import annotations

import base64
import hashlib
import secrets
import string

from ..constants import HTPASSWD_KEY, PASSWORD_KEY, USERNAME_KEY


def generate_username() -> str:
    """Generate a random lowercase username."""
    # 12 characters, always starting with a letter
    characters = string.ascii_lowercase + string.digits
    return secrets.choice(string.ascii_lowercase) + "".join(secrets.choice(characters) for _ in range(11))


def generate_password() -> str:
    """Generate a random password."""
    # 32 characters; ':' is excluded since it separates htpasswd fields
    characters = string.ascii_letters + string.digits + "-_.~"
    return "".join(secrets.choice(characters) for _ in range(32))


def hash_password(password: str, salt: bytes | None = None) -> str:
    """Hash a password in the salted SHA-1 scheme understood by nginx.

    Args:
        password: Plain text password
        salt: Optional salt (random 8 bytes when omitted)

    Returns:
        Hash in ``{SSHA}base64(sha1(password + salt) + salt)`` form
    """
    if salt is None:
        salt = secrets.token_bytes(8)
    digest = hashlib.sha1(password.encode("utf-8") + salt).digest()
    return "{SSHA}" + base64.b64encode(digest + salt).decode("ascii")


def htpasswd_line(username: str, password: str, salt: bytes | None = None) -> str:
    """Render a single htpasswd entry."""
    return f"{username}:{hash_password(password, salt)}\n"


def generate_credentials() -> dict[str, str]:
    """Generate fresh credential material for a credential secret.

    Returns:
        Dict with ``username``, ``password`` and the matching ``htpasswd`` file
    """
    username = generate_username()
    password = generate_password()
    return {
        USERNAME_KEY: username,
        PASSWORD_KEY: password,
        HTPASSWD_KEY: htpasswd_line(username, password),
    }
