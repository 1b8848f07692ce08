"""Pluggable confidentiality schemes for metric payloads.

The transaction engine only moves opaque byte blobs; a scheme decides what
those bytes mean. Swapping in a real homomorphic backend means adding another
:class:`ConfidentialityScheme` and registering it in :data:`SCHEMES`.
"""

from __future__ import annotations

import base64
import binascii
from abc import ABC, abstractmethod

from .exceptions import DecodeError, ValidationError

_ENC_TAG = "[enc]"
_RES_TAG = "[res]"


class ConfidentialityScheme(ABC):
    """Encrypt, evaluate on ciphertext, and decrypt."""

    name: str = ""

    @abstractmethod
    def encrypt(self, plain: str) -> bytes:
        pass

    @abstractmethod
    def evaluate(self, cipher: bytes) -> bytes:
        pass

    @abstractmethod
    def decrypt(self, cipher: bytes) -> str:
        pass


class MockFheScheme(ConfidentialityScheme):
    """Stand-in that tags and base64-wraps plaintext; offers no confidentiality."""

    name = "mock"

    def encrypt(self, plain: str) -> bytes:
        return base64.b64encode((_ENC_TAG + plain).encode("utf-8"))

    def evaluate(self, cipher: bytes) -> bytes:
        text = _unwrap(cipher)
        body = text[len(_ENC_TAG) :] if text.startswith(_ENC_TAG) else text
        return base64.b64encode((_RES_TAG + body[::-1]).encode("utf-8"))

    def decrypt(self, cipher: bytes) -> str:
        text = _unwrap(cipher)
        for tag in (_ENC_TAG, _RES_TAG):
            if text.startswith(tag):
                return text[len(tag) :]
        return text


class PassthroughScheme(ConfidentialityScheme):
    """No-op scheme: payloads are plain UTF-8."""

    name = "noop"

    def encrypt(self, plain: str) -> bytes:
        return plain.encode("utf-8")

    def evaluate(self, cipher: bytes) -> bytes:
        return bytes(cipher)

    def decrypt(self, cipher: bytes) -> str:
        try:
            return bytes(cipher).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError("Payload is not valid UTF-8", details={"error": str(exc)}) from exc


SCHEMES: dict[str, type[ConfidentialityScheme]] = {
    MockFheScheme.name: MockFheScheme,
    PassthroughScheme.name: PassthroughScheme,
}


def get_scheme(name: str) -> ConfidentialityScheme:
    """Instantiate the scheme registered under ``name``."""
    scheme_cls = SCHEMES.get(name.lower())
    if scheme_cls is None:
        raise ValidationError(
            f"Unknown confidentiality scheme: {name}. Must be one of {sorted(SCHEMES)}",
            field="scheme",
            value=name,
        )
    return scheme_cls()


def _unwrap(cipher: bytes) -> str:
    try:
        return base64.b64decode(bytes(cipher), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise DecodeError(
            "Ciphertext is not a mock FHE payload", details={"error": str(exc)}
        ) from exc
