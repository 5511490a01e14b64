from __future__ import annotations

import pytest

from taskledger.rollup.codec import PayloadDecodeError, hex_to_str, str_to_hex


def test_str_to_hex_is_prefixed_lowercase() -> None:
    assert str_to_hex("list") == "0x6c697374"
    assert str_to_hex("") == "0x"


def test_hex_to_str_accepts_prefixed_and_bare() -> None:
    assert hex_to_str("0x6c697374") == "list"
    assert hex_to_str("0X6C697374") == "list"
    assert hex_to_str("6c697374") == "list"


def test_multibyte_text() -> None:
    text = "Tâche ✓"
    assert hex_to_str(str_to_hex(text)) == text


@pytest.mark.parametrize("value", ["0x6", "0xzz", "hello", "0xff"])
def test_invalid_payloads_raise(value: str) -> None:
    with pytest.raises(PayloadDecodeError):
        hex_to_str(value)


@pytest.mark.parametrize("value", ["0x41 42", " 0x4142", "0x4142\n", "0x41\t42"])
def test_whitespace_inside_hex_is_rejected(value: str) -> None:
    with pytest.raises(PayloadDecodeError, match="not valid hex"):
        hex_to_str(value)
