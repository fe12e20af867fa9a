"""
Encrypted credential envelope.

PBKDF2-HMAC-SHA256 derives a 32-byte key from the keyring password and a
fresh 16-byte salt; AES-256-GCM encrypts with a fresh 12-byte nonce. The
plaintext header (version, kdf, iterations, mode, tokenExpiresAt) is bound
as associated data, so editing any of it breaks decryption.

Every failure to open an envelope raises the same DecryptFailure: callers
cannot tell a wrong password from a damaged file.
"""

from __future__ import annotations

import base64
import binascii
import json
import os
from dataclasses import dataclass
from typing import Any, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import (
    Cipher,
    algorithms,
    modes,
)
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from xero_cli.errors import DecryptFailure

ENVELOPE_VERSION = 1
KDF_NAME = "pbkdf2-sha256"
DEFAULT_KDF_ITERATIONS = 210_000
MAX_KDF_ITERATIONS = 10 * DEFAULT_KDF_ITERATIONS
KEY_BYTES = 32
SALT_BYTES = 16
NONCE_BYTES = 12
TAG_BYTES = 16


@dataclass(frozen=True)
class EncryptedEnvelope:
    version: int
    kdf: str
    kdf_iterations: int
    mode: str
    salt: bytes
    iv: bytes
    tag: bytes
    ciphertext: bytes
    token_expires_at: Optional[str] = None

    def header(self) -> dict[str, Any]:
        header: dict[str, Any] = {
            "version": self.version,
            "kdf": self.kdf,
            "kdfIterations": self.kdf_iterations,
            "mode": self.mode,
        }
        if self.token_expires_at is not None:
            header["tokenExpiresAt"] = self.token_expires_at
        return header

    def associated_data(self) -> bytes:
        return _canonical_json(self.header())

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.header(),
            "salt": _b64encode(self.salt),
            "iv": _b64encode(self.iv),
            "tag": _b64encode(self.tag),
            "ciphertext": _b64encode(self.ciphertext),
        }

    @classmethod
    def from_dict(cls, data: Any) -> EncryptedEnvelope:
        """Parse a stored envelope; any structural problem is a DecryptFailure."""
        if not isinstance(data, dict):
            raise DecryptFailure()
        try:
            envelope = cls(
                version=data["version"],
                kdf=data["kdf"],
                kdf_iterations=data["kdfIterations"],
                mode=data["mode"],
                token_expires_at=data.get("tokenExpiresAt"),
                salt=_b64decode(data["salt"]),
                iv=_b64decode(data["iv"]),
                tag=_b64decode(data["tag"]),
                ciphertext=_b64decode(data["ciphertext"]),
            )
        except (KeyError, TypeError, ValueError, binascii.Error):
            raise DecryptFailure() from None

        if (
            envelope.version != ENVELOPE_VERSION
            or envelope.kdf != KDF_NAME
            or not isinstance(envelope.kdf_iterations, int)
            or isinstance(envelope.kdf_iterations, bool)
            or not 0 < envelope.kdf_iterations <= MAX_KDF_ITERATIONS
            or not isinstance(envelope.mode, str)
            or len(envelope.iv) != NONCE_BYTES
            or len(envelope.tag) != TAG_BYTES
            or len(envelope.salt) != SALT_BYTES
        ):
            raise DecryptFailure()
        return envelope


def derive_key(passphrase: str, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_BYTES,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(passphrase.encode("utf-8"))


def seal(
    plaintext: bytes,
    passphrase: str,
    mode: str,
    token_expires_at: Optional[str] = None,
    iterations: Optional[int] = None,
) -> EncryptedEnvelope:
    resolved_iterations = (
        iterations if iterations is not None else DEFAULT_KDF_ITERATIONS
    )
    salt = os.urandom(SALT_BYTES)
    nonce = os.urandom(NONCE_BYTES)

    # Header fields first: they are authenticated alongside the ciphertext.
    unsealed = EncryptedEnvelope(
        version=ENVELOPE_VERSION,
        kdf=KDF_NAME,
        kdf_iterations=resolved_iterations,
        mode=mode,
        token_expires_at=token_expires_at,
        salt=salt,
        iv=nonce,
        tag=b"",
        ciphertext=b"",
    )

    key = derive_key(passphrase, salt, resolved_iterations)
    encryptor = Cipher(algorithms.AES(key), modes.GCM(nonce)).encryptor()
    encryptor.authenticate_additional_data(unsealed.associated_data())
    ciphertext = encryptor.update(plaintext) + encryptor.finalize()

    return EncryptedEnvelope(
        version=unsealed.version,
        kdf=unsealed.kdf,
        kdf_iterations=unsealed.kdf_iterations,
        mode=unsealed.mode,
        token_expires_at=unsealed.token_expires_at,
        salt=salt,
        iv=nonce,
        tag=encryptor.tag,
        ciphertext=ciphertext,
    )


def open_envelope(envelope: EncryptedEnvelope, passphrase: str) -> bytes:
    key = derive_key(passphrase, envelope.salt, envelope.kdf_iterations)
    try:
        decryptor = Cipher(
            algorithms.AES(key), modes.GCM(envelope.iv, envelope.tag)
        ).decryptor()
        decryptor.authenticate_additional_data(envelope.associated_data())
        return decryptor.update(envelope.ciphertext) + decryptor.finalize()
    except (InvalidTag, ValueError):
        raise DecryptFailure() from None


def _canonical_json(value: Any) -> bytes:
    return json.dumps(
        value, sort_keys=True, separators=(",", ":")
    ).encode("utf-8")


def _b64encode(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def _b64decode(value: Any) -> bytes:
    if not isinstance(value, str):
        raise TypeError("expected base64 text")
    return base64.b64decode(value.encode("ascii"), validate=True)
