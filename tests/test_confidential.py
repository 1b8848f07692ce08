"""Tests for the confidentiality schemes."""

from __future__ import annotations

import base64

import pytest

from cvault_api.confidential import MockFheScheme, PassthroughScheme, get_scheme
from cvault_api.exceptions import DecodeError, ValidationError


class TestMockFheScheme:
    def test_encrypt_tags_and_wraps(self):
        assert MockFheScheme().encrypt("42") == base64.b64encode(b"[enc]42")

    def test_decrypt_recovers_plaintext(self):
        scheme = MockFheScheme()
        assert scheme.decrypt(scheme.encrypt("heart-rate=72")) == "heart-rate=72"

    def test_evaluate_produces_result_cipher(self):
        scheme = MockFheScheme()
        result = scheme.evaluate(scheme.encrypt("123"))

        assert base64.b64decode(result) == b"[res]321"
        assert scheme.decrypt(result) == "321"

    def test_garbage_is_decode_error(self):
        with pytest.raises(DecodeError):
            MockFheScheme().decrypt(b"\xff\x00not base64")


def test_passthrough_scheme() -> None:
    scheme = PassthroughScheme()

    assert scheme.encrypt("abc") == b"abc"
    assert scheme.evaluate(b"abc") == b"abc"
    assert scheme.decrypt(b"abc") == "abc"
    with pytest.raises(DecodeError):
        scheme.decrypt(b"\xff")


def test_get_scheme() -> None:
    assert isinstance(get_scheme("MOCK"), MockFheScheme)
    assert isinstance(get_scheme("noop"), PassthroughScheme)

    with pytest.raises(ValidationError) as excinfo:
        get_scheme("tfhe")
    assert excinfo.value.field == "scheme"
