# filename: huffman_blob.py

from collections import namedtuple

import msgpack

from huffman_core import MalformedBlob

# Wire layout: msgpack array [ {token: count, ...}, payload bytes, bit length ]
Blob = namedtuple("Blob", ["frequencies", "data", "bit_len"])


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def dump_blob(frequencies, data, bit_len):
    return msgpack.packb([frequencies, bytes(data), bit_len], use_bin_type=True)


def load_blob(buffer):
    """
    Parse and validate a serialized blob.

    Raises ``MalformedBlob`` when the buffer is not a complete msgpack
    record of the expected shape, or when the payload size disagrees with
    the recorded bit length.
    """
    try:
        record = msgpack.unpackb(buffer, raw=False, use_list=False, strict_map_key=False)
    except (ValueError, TypeError, msgpack.exceptions.UnpackException) as exc:
        raise MalformedBlob(f"cannot decode blob: {exc}") from exc

    if not isinstance(record, tuple) or len(record) != 3:
        raise MalformedBlob("blob must be a three element record")
    frequencies, data, bit_len = record

    if not isinstance(frequencies, dict):
        raise MalformedBlob("frequency table must be a map")
    if not isinstance(data, bytes):
        raise MalformedBlob("payload must be binary")
    if not _is_int(bit_len) or bit_len < 0:
        raise MalformedBlob(f"bit length must be a non-negative int, got {bit_len!r}")

    for token, count in frequencies.items():
        if not _is_int(count) or count < 1:
            raise MalformedBlob(f"count for {token!r} must be a positive int, got {count!r}")
    try:
        tokens = sorted(frequencies)
    except TypeError as exc:
        raise MalformedBlob(f"frequency table keys are not mutually ordered: {exc}") from exc

    expected = (bit_len + 7) // 8
    if len(data) != expected:
        raise MalformedBlob(f"payload is {len(data)} bytes but {bit_len} bits need {expected}")

    return Blob({token: frequencies[token] for token in tokens}, data, bit_len)
