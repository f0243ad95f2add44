import pytest

from remix.optional._require import require
from remix.optional.zstd_support import compress_bytes, decompress_bytes, has_zstd, is_zstd_path


def test_require_missing_names_the_extra():
    with pytest.raises(ImportError, match=r"pip install 'remix\[zstd\]'"):
        require("definitely_not_a_module_xyz", "zstd")


def test_zstd_suffix():
    assert is_zstd_path("out/deltas.json.zst")
    assert not is_zstd_path("out/deltas.json")


@pytest.mark.skipif(not has_zstd(), reason="zstandard not installed")
def test_compress_round_trip():
    payload = b'[{"op":"delete","segmentId":"b"}]' * 10
    blob = compress_bytes(payload)
    assert blob != payload
    assert decompress_bytes(blob) == payload
