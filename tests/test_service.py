import random
import time

import pytest

import huffman_service as hs
from huffman_blob import dump_blob, load_blob
from huffman_config import CodecConfig
from huffman_core import CorruptStream, HuffmanError, HuffmanLogic, MalformedBlob, count_frequencies


def _get_service(**kwargs):
	return hs.HuffmanService(CodecConfig(**kwargs))


def test_hello_world():
	svc = _get_service()

	hello = b"Hello, world!"
	compressed = svc.compress(hello)
	restored = svc.extract(compressed)
	assert restored == list(hello)
	assert len(restored) == 13
	assert svc.decompress(compressed) == hello


def test_roundtrip_random_10kb():
	svc = _get_service()

	data = bytes(random.getrandbits(8) for _ in range(10 * 1024))
	compressed = svc.compress(data)
	out = svc.decompress(compressed)
	assert out == data


def test_roundtrip_all_bytes_once():
	svc = _get_service()

	data = bytes(range(256))
	assert svc.decompress(svc.compress(data)) == data


def test_empty_input():
	svc = _get_service()

	compressed = svc.compress(b"")
	assert compressed
	assert svc.extract(compressed) == []
	assert svc.decompress(compressed) == b""


def test_compress_empty_idempotent():
	svc = _get_service()
	assert svc.compress([]) == svc.compress(b"")


def test_single_byte_repeated():
	svc = _get_service()

	data = b"A" * (1024 * 10)
	compressed = svc.compress(data)
	blob = load_blob(compressed)
	assert blob.frequencies == {ord("A"): len(data)}
	assert blob.bit_len == len(data)
	assert svc.decompress(compressed) == data


def test_small_inputs():
	svc = _get_service()

	for n in (1, 2, 3):
		data = bytes(random.getrandbits(8) for _ in range(n))
		assert svc.decompress(svc.compress(data)) == data


def test_string_and_tuple_tokens():
	svc = _get_service()

	words = "the cat sat on the mat and the cat ran".split()
	assert svc.extract(svc.compress(words)) == words

	pairs = [(1, "a"), (2, "b"), (1, "a"), (3, "c"), (1, "a")]
	assert svc.extract(svc.compress(pairs)) == pairs


def test_generator_input():
	svc = _get_service()
	assert svc.extract(svc.compress(c for c in "mississippi")) == list("mississippi")


def test_table_decoder_matches_tree_decoder():
	data = b"abracadabra, said the wizard" * 20
	compressed = _get_service().compress(data)
	assert _get_service(decoder="table").decompress(compressed) == data
	assert _get_service(decoder="tree").decompress(compressed) == data


@pytest.mark.timeout(120)
def test_compress_is_independent_of_workers():
	rng = random.Random(5)
	data = bytes(rng.choice(b"etaoin shrdlu") for _ in range(20000))

	first = _get_service().compress(data)
	second = _get_service().compress(data)
	parallel = _get_service(workers=4, chunk_size=3000).compress(data)
	assert first == second == parallel
	assert _get_service().decompress(parallel) == data


def test_truncated_payload_is_detected():
	svc = _get_service()

	blob = load_blob(svc.compress(b"This is a test" * 100))
	truncated = dump_blob(blob.frequencies, blob.data[:-1], blob.bit_len)
	with pytest.raises((CorruptStream, MalformedBlob)):
		svc.extract(truncated)

	shortened = dump_blob(blob.frequencies, blob.data[:-1], 8 * (len(blob.data) - 1))
	with pytest.raises((CorruptStream, MalformedBlob)):
		svc.extract(shortened)


def test_truncated_stream_behavior():
	svc = _get_service()

	compressed = svc.compress(b"This is a test" * 100)
	with pytest.raises(MalformedBlob):
		svc.extract(compressed[:-3])


def test_corrupted_header_behavior():
	svc = _get_service()

	compressed = bytearray(svc.compress(b"Hello World" * 50))
	compressed[0] ^= 0xFF
	with pytest.raises(HuffmanError):
		svc.extract(bytes(compressed))


def test_count_mismatch_is_corrupt():
	svc = _get_service()

	blob = load_blob(svc.compress(b"aaaabbc"))
	inflated = {token: count * 2 for token, count in blob.frequencies.items()}
	# doubling every count keeps the tree, so the payload decodes to too few tokens
	assert HuffmanLogic().generate_codes(HuffmanLogic().build_tree(inflated)) == \
		HuffmanLogic().generate_codes(HuffmanLogic().build_tree(blob.frequencies))
	with pytest.raises(CorruptStream):
		svc.extract(dump_blob(inflated, blob.data, blob.bit_len))


def test_decompress_requires_byte_tokens():
	svc = _get_service()

	for tokens in (["ab", "cd", "ab"], [(1, 2), (3, 4)], [0, 256], [-1, 5]):
		compressed = svc.compress(tokens)
		assert svc.extract(compressed) == tokens
		with pytest.raises(MalformedBlob):
			svc.decompress(compressed)


def test_payload_without_alphabet_is_corrupt():
	with pytest.raises(CorruptStream):
		_get_service().extract(dump_blob({}, b"\x00", 3))


def test_module_level_api(monkeypatch):
	monkeypatch.delenv("RUFFMAN_WORKERS", raising=False)
	monkeypatch.setenv("RUFFMAN_DECODER", "table")

	tokens = list("compress me, then extract me")
	buf = hs.compress(tokens)
	assert hs.extract(buf) == tokens
	assert hs.extract(buf, decoder="tree") == tokens


def test_service_initializes_logic_attribute():
	svc = hs.HuffmanService()
	assert isinstance(svc.logic, HuffmanLogic)
	assert svc.config == CodecConfig()


@pytest.mark.timeout(120)
def test_performance_5mb_baseline():
	svc = _get_service()
	data = bytes(random.getrandbits(8) for _ in range(5 * 1024 * 1024))
	t0 = time.time()
	compressed = svc.compress(data)
	dur = time.time() - t0
	assert dur > 0
	assert load_blob(compressed).frequencies == count_frequencies(data)
	print(f"Baseline compression time for 5MB: {dur:.4f}s")
