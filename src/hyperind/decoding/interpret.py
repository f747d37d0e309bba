"""Byte interpreters for Hypermap note/fact payloads.

All `decode_*` helpers and `interpret` are total: malformed input yields the
input unchanged (text) or None (everything else), never an exception.
`token_id_to_namehash` is the exception to the rule and raises
`MalformedInputError`, since a bad token id must skip its Transfer.
"""

from __future__ import annotations

from typing import Any

from eth_utils import decode_hex, to_int, to_text

from hyperind.constants import MAX_SAFE_INTEGER
from hyperind.core.errors import MalformedInputError

IP_LABEL = "~ip"
PORT_SUFFIX = "-port"
# binary payloads that must never be shown as text
OPAQUE_LABELS = frozenset({"~net-key", "~routers"})

_HEX_DIGITS = frozenset("0123456789abcdef")


def _is_trivial(hex_str: str | None) -> bool:
    return not hex_str or hex_str == "0x" or len(hex_str) <= 2


def decode_utf8_safe(hex_str: str) -> str:
    """Decode a hex byte string as UTF-8, or return it unchanged."""
    if _is_trivial(hex_str):
        return hex_str
    try:
        return to_text(hexstr=hex_str)
    except (ValueError, TypeError):
        return hex_str


def _compress_hextets(hextets: list[str]) -> str:
    """Join IPv6 groups, folding the leftmost longest zero run (> 1 group) into '::'."""
    best_start, best_len = -1, 0
    cur_start, cur_len = -1, 0
    for i, h in enumerate(hextets):
        if h == "0":
            if cur_len == 0:
                cur_start = i
            cur_len += 1
            if cur_len > best_len:
                best_start, best_len = cur_start, cur_len
        else:
            cur_len = 0

    if best_len > 1:
        head = ":".join(hextets[:best_start])
        tail = ":".join(hextets[best_start + best_len:])
        return f"{head}::{tail}"
    return ":".join(hextets)


def decode_ip(hex_str: str) -> str | None:
    """Render a 4-byte (IPv4) or 16-byte (IPv6) payload as an address string."""
    if not hex_str or len(hex_str) not in (10, 34):
        return None
    try:
        raw = decode_hex(hex_str)
    except ValueError:
        return None

    if len(raw) == 4:
        return ".".join(str(b) for b in raw)
    if len(raw) == 16:
        hextets = [f"{int.from_bytes(raw[i:i + 2], 'big'):x}" for i in range(0, 16, 2)]
        return _compress_hextets(hextets)
    return None


def decode_uint(hex_str: str) -> int | str | None:
    """Parse an unsigned big-endian integer.

    Values above 2**53 - 1 come back as decimal strings so JSON consumers
    keep full precision.
    """
    if _is_trivial(hex_str):
        return None
    try:
        v = to_int(hexstr=hex_str)
    except (ValueError, TypeError):
        return None
    if v < 0:
        return None
    return v if v <= MAX_SAFE_INTEGER else str(v)


def interpret(label: str | None, data_hex: str | None) -> Any:
    """Interpret a note/fact payload according to its label."""
    if _is_trivial(data_hex):
        return None
    label = label or ""
    opaque = label in OPAQUE_LABELS

    value: Any = None
    if label == IP_LABEL:
        value = decode_ip(data_hex)
    elif label.endswith(PORT_SUFFIX):
        if len(data_hex) == 6:
            value = decode_uint(data_hex)

    # fall back to text for anything not already interpreted
    if value is None and not opaque:
        text = decode_utf8_safe(data_hex)
        if text != data_hex:
            value = text
    return value


def token_id_to_namehash(token_id: int | str | None) -> str:
    """Convert an ERC-721 token id (decimal or 0x hex) to its 32-byte namehash."""
    if isinstance(token_id, bool) or token_id is None:
        raise MalformedInputError(f"invalid token id: {token_id!r}")

    try:
        if isinstance(token_id, str) and token_id.lower().startswith("0x"):
            digits = token_id[2:].lower()
            if not digits or any(c not in _HEX_DIGITS for c in digits):
                raise ValueError(digits)
        elif isinstance(token_id, (str, int)):
            # plain ASCII decimal only: no whitespace, underscores or other scripts
            if isinstance(token_id, str) and not (token_id.isascii() and token_id.isdigit()):
                raise ValueError(token_id)
            v = int(token_id)
            if v < 0:
                raise MalformedInputError(f"negative token id: {token_id!r}")
            digits = f"{v:x}"
        else:
            raise MalformedInputError(f"invalid token id type: {type(token_id).__name__}")
    except ValueError as e:
        raise MalformedInputError(f"invalid token id: {token_id!r}") from e

    if len(digits) > 64:
        raise MalformedInputError(f"token id wider than 32 bytes: {token_id!r}")
    return "0x" + digits.zfill(64)
