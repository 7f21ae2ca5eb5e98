from compmatrix.algos import Algorithm, AlgorithmRegistry, DEFAULT_REGISTRY
from compmatrix.common.models import AlgorithmId, Direction
from compmatrix.errors import InvalidConfigurationError, MissingLibraryError
from typing import Final
from unittest.mock import patch

import pytest

SAMPLE_BYTES: Final[bytes] = b"Some contents"
PAYLOADS = [b"", bytes([1, 2, 3, 4, 5, 6]), 100 * SAMPLE_BYTES, bytes(range(256)) * 4]


@pytest.mark.parametrize("algorithm", list(AlgorithmId))
@pytest.mark.parametrize("payload", PAYLOADS, ids=["empty", "one-to-six", "sample-bytes", "all-bytes"])
def test_reference_round_trip(algorithm: AlgorithmId, payload: bytes) -> None:
    algo = DEFAULT_REGISTRY.get(algorithm)
    assert algo.decode(algo.encode(payload)) == payload


@pytest.mark.parametrize("algorithm", list(AlgorithmId))
def test_streaming_encoder_agrees_with_reference_decoder(algorithm: AlgorithmId) -> None:
    algo = DEFAULT_REGISTRY.get(algorithm)
    payload = 100 * SAMPLE_BYTES
    encoder = algo.new_encoder()
    encoded = b"".join(encoder.process(payload[i : i + 10]) for i in range(0, len(payload), 10)) + encoder.finish()
    assert algo.decode(encoded) == payload
    if algo.exact_framing:
        assert encoded == algo.encode(payload)


@pytest.mark.parametrize("algorithm", list(AlgorithmId))
def test_streaming_decoder_agrees_with_reference_encoder(algorithm: AlgorithmId) -> None:
    algo = DEFAULT_REGISTRY.get(algorithm)
    payload = 100 * SAMPLE_BYTES
    encoded = algo.encode(payload)
    decoder = algo.new_transformer(Direction.decode)
    decoded = b"".join(decoder.process(encoded[i : i + 1]) for i in range(len(encoded))) + decoder.finish()
    assert decoded == payload
    assert decoder.finished


def test_get_by_name() -> None:
    assert DEFAULT_REGISTRY.get("gzip").name == AlgorithmId.gzip
    assert DEFAULT_REGISTRY.get(AlgorithmId.bz2).max_block_size == 900_000


def test_get_unknown() -> None:
    with pytest.raises(InvalidConfigurationError, match="unknown compression algorithm: 'brotli'"):
        DEFAULT_REGISTRY.get("brotli")


def test_get_not_registered() -> None:
    registry = AlgorithmRegistry([Algorithm(name=AlgorithmId.identity, encode=bytes, decode=bytes)])
    assert registry.available() == [AlgorithmId.identity]
    with pytest.raises(InvalidConfigurationError):
        registry.get(AlgorithmId.gzip)


def test_available_preserves_declaration_order() -> None:
    assert DEFAULT_REGISTRY.available() == list(AlgorithmId)


def test_missing_library() -> None:
    with patch("compmatrix.compressor.zstd", None):
        assert AlgorithmId.zstd not in AlgorithmRegistry().available()
        with pytest.raises(MissingLibraryError):
            DEFAULT_REGISTRY.get(AlgorithmId.zstd)


def test_edge_parameters() -> None:
    identity = DEFAULT_REGISTRY.get(AlgorithmId.identity)
    assert not identity.has_trailer
    assert not DEFAULT_REGISTRY.get(AlgorithmId.snappy).has_trailer
    assert DEFAULT_REGISTRY.get(AlgorithmId.zstd).has_trailer
    assert identity.exact_framing
    assert not identity.detects_truncation
    assert DEFAULT_REGISTRY.get(AlgorithmId.lzma).detects_truncation
    assert not DEFAULT_REGISTRY.get(AlgorithmId.zstd).exact_framing
