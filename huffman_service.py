# filename: huffman_service.py

import logging

from huffman_bits import pack, unpack_table, unpack_tree
from huffman_blob import dump_blob, load_blob
from huffman_config import CodecConfig
from huffman_core import CorruptStream, HuffmanLogic, MalformedBlob, as_sequence, count_frequencies

logger = logging.getLogger(__name__)


class HuffmanService:
    def __init__(self, config=None):
        self.logic = HuffmanLogic()
        self.config = config if config is not None else CodecConfig()

    def compress(self, tokens):
        tokens = as_sequence(tokens)
        workers = self.config.workers
        chunk_size = self.config.chunk_size

        freqs = count_frequencies(tokens, workers=workers, chunk_size=chunk_size)
        if not freqs:
            return dump_blob({}, b"", 0)

        tree = self.logic.build_tree(freqs)
        codes = self.logic.generate_codes(tree)
        data, bit_len = pack(tokens, codes, workers=workers, chunk_size=chunk_size)
        logger.debug("compressed %d distinct tokens into %d bits", len(freqs), bit_len)
        return dump_blob(freqs, data, bit_len)

    def extract(self, buffer):
        blob = load_blob(buffer)
        if not blob.frequencies:
            if blob.bit_len:
                raise CorruptStream("payload present but frequency table is empty")
            return []

        tree = self.logic.build_tree(blob.frequencies)
        if self.config.decoder == "table":
            tokens = unpack_table(blob.data, blob.bit_len, self.logic.generate_codes(tree))
        else:
            tokens = unpack_tree(blob.data, blob.bit_len, tree)

        expected = sum(blob.frequencies.values())
        if len(tokens) != expected:
            raise CorruptStream(f"decoded {len(tokens)} tokens, frequency table records {expected}")
        return tokens

    def decompress(self, buffer):
        tokens = self.extract(buffer)
        for token in set(tokens):
            if isinstance(token, bool) or not isinstance(token, int) or not 0 <= token <= 255:
                raise MalformedBlob("blob does not hold byte tokens")
        return bytes(tokens)


def compress(tokens, workers=None, chunk_size=None):
    config = CodecConfig.from_env(workers=workers, chunk_size=chunk_size)
    return HuffmanService(config).compress(tokens)


def extract(buffer, decoder=None):
    return HuffmanService(CodecConfig.from_env(decoder=decoder)).extract(buffer)


def read_all(path):
    with open(path, "rb") as f:
        return f.read()


def write_all(path, data):
    # never clobber an existing file
    with open(path, "xb") as f:
        f.write(data)
    return len(data)


def compress_file(src, dest, service=None):
    if service is None:
        service = HuffmanService(CodecConfig.from_env())
    return write_all(dest, service.compress(read_all(src)))


def extract_file(src, dest, service=None):
    if service is None:
        service = HuffmanService(CodecConfig.from_env())
    return write_all(dest, service.decompress(read_all(src)))
