import pytest
from hypothesis import given
from hypothesis import strategies as st

from dovimeta.bitstream import BitReader, BitWriter, RpuError
from dovimeta.blocks.brightness import (
    CmVersion,
    ExtMetadataBlockLevel1,
    ExtMetadataBlockLevel3,
    ExtMetadataBlockLevel4,
    ExtMetadataBlockLevel6,
)

u12 = st.integers(min_value=0, max_value=4095)
lum = st.integers(min_value=0, max_value=10000)


def _roundtrip(block, cls):
    writer = BitWriter()
    block.write(writer)
    assert len(writer) == block.required_bits()
    return cls.parse(BitReader(writer.to_bytes()))


@given(u12, u12, u12)
def test_level1_roundtrip(a, b, c):
    block = ExtMetadataBlockLevel1(a, b, c)
    assert _roundtrip(block, ExtMetadataBlockLevel1) == block


def test_level1_sizes():
    block = ExtMetadataBlockLevel1()
    assert block.level() == 1
    assert block.length_bytes() == 5
    assert block.required_bits() == 36


def test_level1_validate_rejects_large_values():
    with pytest.raises(RpuError):
        ExtMetadataBlockLevel1(0, 4096, 0).validate()
    with pytest.raises(RpuError):
        ExtMetadataBlockLevel1(0, 0, 4096).write(BitWriter())


def test_level1_clamp_v29():
    block = ExtMetadataBlockLevel1.from_stats_cm_version(20, 1000, 500, CmVersion.V29)
    assert (block.min_pq, block.max_pq, block.avg_pq) == (12, 2081, 819)


def test_level1_clamp_v40():
    block = ExtMetadataBlockLevel1.from_stats_cm_version(0, 2828, 1000, CmVersion.V40)
    assert (block.min_pq, block.max_pq, block.avg_pq) == (0, 2828, 1229)


@given(u12, u12, u12, st.sampled_from(list(CmVersion)))
def test_level1_clamp_invariants(a, b, c, version):
    block = ExtMetadataBlockLevel1(a, b, c)
    block.clamp_values_cm_version(version)
    assert 0 <= block.min_pq <= 12
    assert 2081 <= block.max_pq <= 4095
    assert block.avg_pq < block.max_pq
    block.validate()


def test_level3_defaults_and_roundtrip():
    block = ExtMetadataBlockLevel3()
    assert (block.min_pq_offset, block.max_pq_offset, block.avg_pq_offset) == (2048, 2048, 2048)
    custom = ExtMetadataBlockLevel3(2048, 2048, 1871)
    assert _roundtrip(custom, ExtMetadataBlockLevel3) == custom
    assert custom.level() == 3


def test_level3_validate():
    with pytest.raises(RpuError):
        ExtMetadataBlockLevel3(4096, 0, 0).validate()


@given(u12, u12)
def test_level4_roundtrip(a, b):
    block = ExtMetadataBlockLevel4(a, b)
    assert _roundtrip(block, ExtMetadataBlockLevel4) == block


def test_level4_validate_and_sizes():
    assert ExtMetadataBlockLevel4().length_bytes() == 3
    with pytest.raises(RpuError):
        ExtMetadataBlockLevel4(0, 5000).validate()


@given(lum, lum, lum, lum)
def test_level6_roundtrip(a, b, c, d):
    block = ExtMetadataBlockLevel6(a, b, c, d)
    assert _roundtrip(block, ExtMetadataBlockLevel6) == block


def test_level6_validate():
    with pytest.raises(RpuError):
        ExtMetadataBlockLevel6(10001, 1, 0, 0).validate()


@pytest.mark.parametrize(
    "max_lum, min_lum, expected",
    [
        (1000, 1, (7, 3079)),
        (2000, 50, (62, 3388)),
        (4000, 10, (7, 3696)),
        (10000, 1, (7, 4095)),
        (600, 20, (0, 3079)),
    ],
)
def test_level6_source_meta(max_lum, min_lum, expected):
    block = ExtMetadataBlockLevel6(max_lum, min_lum, 0, 0)
    assert block.source_meta_from_l6() == expected


def test_level6_wire_bytes():
    writer = BitWriter()
    ExtMetadataBlockLevel6(1000, 1, 3948, 120).write(writer)
    assert writer.to_bytes() == (1000).to_bytes(2, "big") + (1).to_bytes(2, "big") + (
        3948
    ).to_bytes(2, "big") + (120).to_bytes(2, "big")