from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from xero_cli.errors import (
    CredentialsMissing,
    DecryptFailure,
    StoredModeMismatch,
)
from xero_cli.logging import get_logger
from xero_cli.types import AuthFileStatus, AuthMode, StoredAuthState

from .envelope import EncryptedEnvelope, open_envelope, seal
from .state_serializer import AuthStateSerializer, token_expiry_iso

logger = get_logger("credentials")

FILE_PERMISSIONS = 0o600
DIRECTORY_PERMISSIONS = 0o700


class CredentialStore:
    """
    Sole owner of the encrypted auth file.

    Every write replaces the whole file with a freshly salted envelope; there
    are no partial updates.
    """

    def __init__(self, path: Path | str, kdf_iterations: Optional[int] = None):
        self._path = Path(path)
        self._kdf_iterations = kdf_iterations
        self._serializer = AuthStateSerializer()

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def store(self, state: StoredAuthState, passphrase: str) -> Path:
        plaintext = json.dumps(self._serializer.serialize(state)).encode(
            "utf-8"
        )
        envelope = seal(
            plaintext,
            passphrase,
            mode=state.mode.value,
            token_expires_at=token_expiry_iso(state),
            iterations=self._kdf_iterations,
        )
        self._write_atomically(json.dumps(envelope.to_dict(), indent=2))
        logger.debug(f"Stored {state.mode.value} credentials at {self._path}")
        return self._path

    def load(
        self,
        passphrase: str,
        expected_mode: Optional[AuthMode] = None,
    ) -> StoredAuthState:
        envelope = self._read_envelope()
        plaintext = open_envelope(envelope, passphrase)

        try:
            data = json.loads(plaintext.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise DecryptFailure() from None

        state = self._serializer.deserialize(data)
        if state.mode.value != envelope.mode:
            raise DecryptFailure()

        if expected_mode is not None and state.mode != expected_mode:
            raise StoredModeMismatch(expected_mode.value, state.mode.value)
        return state

    def status(self) -> AuthFileStatus:
        """Report what the clear-text header says, without decrypting."""
        if not self.exists():
            return AuthFileStatus(path=self._path, exists=False)

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            return AuthFileStatus(path=self._path, exists=True)
        if not isinstance(data, dict):
            return AuthFileStatus(path=self._path, exists=True)

        try:
            mode: Optional[AuthMode] = AuthMode(data.get("mode"))
        except ValueError:
            mode = None
        token_expires_at = data.get("tokenExpiresAt")

        return AuthFileStatus(
            path=self._path,
            exists=True,
            mode=mode,
            token_expires_at=(
                token_expires_at if isinstance(token_expires_at, str) else None
            ),
        )

    def delete(self) -> bool:
        try:
            self._path.unlink()
        except FileNotFoundError:
            return False
        logger.debug(f"Removed auth file {self._path}")
        return True

    def _read_envelope(self) -> EncryptedEnvelope:
        if not self.exists():
            raise CredentialsMissing(
                f"No stored credentials at {self._path}. "
                "Run `xero auth login` first."
            )
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as read_error:
            raise CredentialsMissing(
                f"Cannot read stored credentials at {self._path}: "
                f"{read_error.strerror}"
            ) from None
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise DecryptFailure() from None
        return EncryptedEnvelope.from_dict(raw)

    def _write_atomically(self, content: str) -> None:
        directory = self._path.parent
        if not directory.exists():
            directory.mkdir(parents=True, mode=DIRECTORY_PERMISSIONS)
            os.chmod(directory, DIRECTORY_PERMISSIONS)

        file_descriptor, temp_name = tempfile.mkstemp(
            dir=directory, prefix=".auth-", suffix=".tmp"
        )
        try:
            os.chmod(temp_name, FILE_PERMISSIONS)
            with os.fdopen(file_descriptor, "w", encoding="utf-8") as handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, self._path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
        os.chmod(self._path, FILE_PERMISSIONS)
