from __future__ import annotations

import string


class PayloadDecodeError(ValueError):
    """Raised when a rollup payload is not valid hex-encoded UTF-8."""


def hex_to_str(value: str) -> str:
    raw = value[2:] if value[:2].lower() == "0x" else value
    if any(ch not in string.hexdigits for ch in raw):
        raise PayloadDecodeError("payload is not valid hex: non-hexadecimal character")
    try:
        data = bytes.fromhex(raw)
    except ValueError as exc:
        raise PayloadDecodeError(f"payload is not valid hex: {exc}") from exc
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise PayloadDecodeError(f"payload is not valid UTF-8: {exc.reason}") from exc


def str_to_hex(text: str) -> str:
    return "0x" + text.encode("utf-8").hex()


__all__ = ["PayloadDecodeError", "hex_to_str", "str_to_hex"]
