"""Stable opaque identity for the participant on this device."""

from __future__ import annotations

import hashlib
import logging
import uuid
from pathlib import Path
from typing import Callable, Optional

from .kv import KeyValueStore

logger = logging.getLogger(__name__)

IDENTITY_KEY = "rolltheworld:deviceId"
DEFAULT_SALT = "rolltheworld-prototype"
MACHINE_ID_PATHS = (Path("/etc/machine-id"), Path("/var/lib/dbus/machine-id"))


def read_machine_id() -> Optional[str]:
    """Return the host's machine id if the platform exposes one."""

    for path in MACHINE_ID_PATHS:
        try:
            value = path.read_text(encoding="utf-8").strip()
        except OSError:
            continue
        if value:
            return value
    return None


def hash_identity(base: str, salt: str = DEFAULT_SALT) -> str:
    return hashlib.sha256(f"{salt}:{base}".encode("utf-8")).hexdigest()


class IdentityProvider:
    """Derives the device identity once and keeps it in local storage.

    Parameters
    ----------
    kv : KeyValueStore
        Storage holding the identity under :data:`IDENTITY_KEY`.
    hardware_id : Optional[Callable[[], Optional[str]]], default: None
        Source of a hardware identifier. Defaults to :func:`read_machine_id`;
        a random UUID is used when it yields nothing.
    salt : str
        Salt mixed into the hash.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        hardware_id: Optional[Callable[[], Optional[str]]] = None,
        salt: str = DEFAULT_SALT,
    ) -> None:
        self._kv = kv
        self._hardware_id = hardware_id or read_machine_id
        self._salt = salt

    def resolve_identity(self) -> str:
        stored = self._read()
        if stored:
            return stored

        base = self._hardware_id() or str(uuid.uuid4())
        identity = hash_identity(base, self._salt)
        self._write(identity)
        return identity

    def _read(self) -> Optional[str]:
        try:
            raw = self._kv.get(IDENTITY_KEY)
        except Exception as e:
            logger.warning(f"Identity storage read failed: {e}")
            return None
        if not raw:
            return None
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Stored identity is not valid UTF-8; deriving a new one")
            return None

    def _write(self, identity: str) -> None:
        try:
            self._kv.set(IDENTITY_KEY, identity.encode("utf-8"))
        except Exception as e:
            logger.warning(f"Identity storage write failed: {e}")


__all__ = ["IdentityProvider", "IDENTITY_KEY", "hash_identity", "read_machine_id"]
