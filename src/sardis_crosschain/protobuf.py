"""Minimal proto3 writer for the Tron and Cosmos transaction envelopes.

Only what those envelopes use: varints, length-delimited bytes, strings and
embedded messages. Default values (0, empty) are omitted as proto3 does.
"""
from __future__ import annotations

from typing import Iterable

WIRE_VARINT = 0
WIRE_LEN = 2


def encode_varint(value: int) -> bytes:
    if value < 0:
        # int64 negatives use the ten-byte two's complement form
        value += 1 << 64
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _key(field_number: int, wire_type: int) -> bytes:
    return encode_varint((field_number << 3) | wire_type)


class ProtoWriter:
    """Appends fields in call order. Callers pass fields in field-number order."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def varint(self, field_number: int, value: int) -> "ProtoWriter":
        if value:
            self._buf += _key(field_number, WIRE_VARINT) + encode_varint(value)
        return self

    def raw(self, field_number: int, value: bytes) -> "ProtoWriter":
        if value:
            self._buf += _key(field_number, WIRE_LEN) + encode_varint(len(value)) + value
        return self

    def string(self, field_number: int, value: str) -> "ProtoWriter":
        return self.raw(field_number, value.encode("utf-8"))

    def message(self, field_number: int, value: "ProtoWriter | bytes") -> "ProtoWriter":
        payload = value.finish() if isinstance(value, ProtoWriter) else value
        # embedded messages are written even when empty
        self._buf += _key(field_number, WIRE_LEN) + encode_varint(len(payload)) + payload
        return self

    def repeated_bytes(self, field_number: int, values: Iterable[bytes]) -> "ProtoWriter":
        for value in values:
            self._buf += _key(field_number, WIRE_LEN) + encode_varint(len(value)) + value
        return self

    def repeated_messages(self, field_number: int, values: Iterable["ProtoWriter | bytes"]) -> "ProtoWriter":
        for value in values:
            self.message(field_number, value)
        return self

    def finish(self) -> bytes:
        return bytes(self._buf)


def any_message(type_url: str, value: bytes) -> ProtoWriter:
    """google.protobuf.Any"""
    return ProtoWriter().string(1, type_url).raw(2, value)


__all__ = ["ProtoWriter", "any_message", "encode_varint"]
