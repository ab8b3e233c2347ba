"""Per-instance GitLab token storage in the OS keychain.

A token is only valid on the GitLab instance that issued it, so each host
gets its own keychain entry (``token@gitlab.com``,
``token@git.example.com:8080``). Every function takes the instance's base
URL, as found on ``ProjectRef.base_url`` or ``Settings.gitlab_url``.
"""

from __future__ import annotations

import logging
from urllib.parse import urlparse

import keyring
from keyring.backends import fail
from keyring.errors import KeyringError, PasswordDeleteError

logger = logging.getLogger(__name__)

_SERVICE_NAME = "LabRepo"

# The "fail" backend means no usable keychain was detected.
_AVAILABLE = not isinstance(keyring.get_keyring(), fail.Keyring)


def is_available() -> bool:
    """Return True if the OS keychain is usable."""
    return _AVAILABLE


def account_for(base_url: str) -> str:
    """Return the keychain account name for a GitLab instance.

    The scheme and any path are ignored, and the host is lower-cased, so
    ``https://GitLab.com/`` and ``http://gitlab.com`` share one entry.
    A non-default port is kept.

    Raises:
        ValueError: if ``base_url`` has no host.
    """
    parsed = urlparse(base_url if "://" in base_url else f"https://{base_url}")
    host = (parsed.hostname or "").lower()
    if not host:
        raise ValueError(f"No host in GitLab URL: {base_url!r}")
    if parsed.port:
        host = f"{host}:{parsed.port}"
    return f"token@{host}"


def load(base_url: str) -> str | None:
    """Return the saved token for ``base_url``, or None."""
    if not _AVAILABLE:
        return None
    account = account_for(base_url)
    try:
        return keyring.get_password(_SERVICE_NAME, account)
    except KeyringError:
        logger.warning("Failed to load %s from keyring", account)
        return None


def save(base_url: str, token: str) -> bool:
    """Save ``token`` for ``base_url``. Returns True on success."""
    if not _AVAILABLE or not token:
        return False
    account = account_for(base_url)
    try:
        keyring.set_password(_SERVICE_NAME, account, token)
    except KeyringError:
        logger.warning("Failed to save %s to keyring", account)
        return False
    logger.info("Saved token for %s", account)
    return True


def delete(base_url: str) -> bool:
    """Forget the token for ``base_url``. Returns False if none was saved."""
    if not _AVAILABLE:
        return False
    account = account_for(base_url)
    try:
        keyring.delete_password(_SERVICE_NAME, account)
    except PasswordDeleteError:
        return False
    except KeyringError:
        logger.warning("Failed to delete %s from keyring", account)
        return False
    return True
