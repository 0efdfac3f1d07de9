# filename: huffman_bits.py

import logging
import multiprocessing

from bitarray import bitarray

from huffman_core import DEFAULT_CHUNK_SIZE, CorruptStream, UnknownToken, as_sequence, split_chunks

logger = logging.getLogger(__name__)

_MISSING = object()


def _pack_chunk(chunk, codes):
    bits = bitarray(endian="big")
    for token in chunk:
        try:
            bits.extend(codes[token])
        except KeyError:
            raise UnknownToken(token) from None
    return bits


def pack(tokens, codes, workers=1, chunk_size=DEFAULT_CHUNK_SIZE):
    """
    Concatenate the code of every token, MSB first.

    Returns ``(data, bit_len)`` where ``data`` is zero padded to a whole
    number of bytes and ``bit_len`` is the exact number of meaningful bits.
    """
    tokens = as_sequence(tokens)
    if workers > 1 and len(tokens) > chunk_size:
        chunks = split_chunks(tokens, chunk_size)
        logger.debug("packing %d chunks on %d workers", len(chunks), workers)
        with multiprocessing.Pool(min(workers, len(chunks))) as pool:
            partials = pool.starmap(_pack_chunk, [(chunk, codes) for chunk in chunks])
        bits = bitarray(endian="big")
        for partial in partials:
            bits.extend(partial)
    else:
        bits = _pack_chunk(tokens, codes)

    logger.debug("packed %d tokens into %d bits", len(tokens), len(bits))
    return bits.tobytes(), len(bits)


def _payload_bits(data, bit_len):
    if bit_len < 0 or bit_len > 8 * len(data):
        raise CorruptStream(f"bit length {bit_len} does not fit a {len(data)} byte payload")
    bits = bitarray(endian="big")
    bits.frombytes(data)
    return bits[:bit_len]


def unpack_tree(data, bit_len, root):
    """Decode by walking ``root`` one bit at a time."""
    bits = _payload_bits(data, bit_len)
    tokens = []

    if root.is_leaf():
        if bits.any():
            raise CorruptStream("set bit in a single-token stream")
        return [root.token] * bit_len

    node = root
    for bit in bits:
        node = node.right if bit else node.left
        if node.is_leaf():
            tokens.append(node.token)
            node = root

    if node is not root:
        raise CorruptStream("stream ends in the middle of a code")
    return tokens


def unpack_table(data, bit_len, codes):
    """Decode by growing a scratch buffer until it equals a code."""
    bits = _payload_bits(data, bit_len)
    lookup = {code.to01(): token for token, code in codes.items()}
    longest = max((len(code) for code in codes.values()), default=0)
    tokens = []

    scratch = ""
    for bit in bits.to01():
        scratch += bit
        token = lookup.get(scratch, _MISSING)
        if token is not _MISSING:
            tokens.append(token)
            scratch = ""
        elif len(scratch) >= longest:
            raise CorruptStream(f"no code matches {scratch!r}")

    if scratch:
        raise CorruptStream("stream ends in the middle of a code")
    return tokens
