# filename: huffman_core.py

import heapq
import itertools
import logging
import multiprocessing
from collections import Counter
from collections.abc import Sequence

from bitarray import bitarray

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1 << 16


class HuffmanError(Exception):
    """Base class for every failure raised by the codec."""


class EmptyAlphabet(HuffmanError):
    pass


class UnknownToken(HuffmanError, KeyError):
    def __init__(self, token):
        super().__init__(token)
        self.token = token

    def __str__(self):
        return f"token {self.token!r} has no code in the table"


class MalformedBlob(HuffmanError, ValueError):
    pass


class CorruptStream(HuffmanError, ValueError):
    pass


class HuffmanNode:
    def __init__(self, token, freq, left=None, right=None):
        self.token = token
        self.freq = freq
        self.left = left
        self.right = right

    def is_leaf(self):
        return self.left is None and self.right is None

    def __repr__(self):
        if self.is_leaf():
            return f"HuffmanNode(token={self.token!r}, freq={self.freq})"
        return f"HuffmanNode(freq={self.freq})"


def as_sequence(tokens):
    if isinstance(tokens, Sequence):
        return tokens
    return list(tokens)


def split_chunks(tokens, chunk_size):
    return [tokens[i:i + chunk_size] for i in range(0, len(tokens), chunk_size)]


def _count_chunk(chunk):
    return Counter(chunk)


def count_frequencies(tokens, workers=1, chunk_size=DEFAULT_CHUNK_SIZE):
    """
    Tally every distinct token in ``tokens``.

    The returned dict iterates in sorted token order. With ``workers > 1``
    contiguous chunks are counted in a process pool and the partial tallies
    are summed in chunk order, so the result never depends on the pool.
    """
    tokens = as_sequence(tokens)
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    if workers > 1 and len(tokens) > chunk_size:
        chunks = split_chunks(tokens, chunk_size)
        logger.debug("counting %d chunks on %d workers", len(chunks), workers)
        with multiprocessing.Pool(min(workers, len(chunks))) as pool:
            partials = pool.map(_count_chunk, chunks)
    else:
        partials = [_count_chunk(tokens)]

    total = Counter()
    for partial in partials:
        total.update(partial)
    return {token: total[token] for token in sorted(total)}


class HuffmanLogic:
    def build_tree(self, frequencies):
        """
        Build the Huffman tree for a token -> count mapping.

        Heap entries are ``(freq, seq, node)``. Leaves get their ``seq`` in
        sorted token order and merged nodes get the next one, so equal
        frequencies always pop in the same order and an independent rebuild
        from the same mapping yields the same tree. The first node popped
        becomes the right child.
        """
        if not frequencies:
            raise EmptyAlphabet("cannot build a Huffman tree from zero tokens")

        seq = itertools.count()
        priority_queue = []
        for token in sorted(frequencies):
            freq = frequencies[token]
            if isinstance(freq, bool) or not isinstance(freq, int) or freq < 1:
                raise ValueError(f"frequency of {token!r} must be a positive int, got {freq!r}")
            priority_queue.append((freq, next(seq), HuffmanNode(token, freq)))
        heapq.heapify(priority_queue)

        while len(priority_queue) > 1:
            right_freq, _, right = heapq.heappop(priority_queue)
            left_freq, _, left = heapq.heappop(priority_queue)
            merged = HuffmanNode(None, left_freq + right_freq, left, right)
            heapq.heappush(priority_queue, (merged.freq, next(seq), merged))

        logger.debug("built Huffman tree over %d tokens", len(frequencies))
        return priority_queue[0][2]

    def generate_codes(self, node):
        """Map every leaf token to its root-to-leaf path (left 0, right 1)."""
        if node.is_leaf():
            # A lone token still needs one bit per occurrence to be replayable.
            return {node.token: bitarray("0")}

        codes = {}

        def walk(node, current_code):
            if node.is_leaf():
                codes[node.token] = current_code
                return
            walk(node.left, current_code + bitarray("0"))
            walk(node.right, current_code + bitarray("1"))

        walk(node, bitarray())
        return codes
