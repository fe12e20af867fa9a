from .credential_store import CredentialStore
from .envelope import (
    DEFAULT_KDF_ITERATIONS,
    EncryptedEnvelope,
    open_envelope,
    seal,
)
from .state_serializer import AuthStateSerializer, epoch_to_iso

__all__ = [
    "CredentialStore",
    "DEFAULT_KDF_ITERATIONS",
    "EncryptedEnvelope",
    "open_envelope",
    "seal",
    "AuthStateSerializer",
    "epoch_to_iso",
]
