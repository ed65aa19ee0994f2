import pytest
from hypothesis import given
from hypothesis import strategies as st

from dovimeta.bitstream import BitReader, BitWriter, RpuError
from dovimeta.blocks.brightness import (
    ExtMetadataBlockLevel1,
    ExtMetadataBlockLevel3,
    ExtMetadataBlockLevel4,
    ExtMetadataBlockLevel6,
)
from dovimeta.blocks.display import (
    ExtMetadataBlockLevel5,
    ExtMetadataBlockLevel9,
    ExtMetadataBlockLevel10,
    ExtMetadataBlockLevel11,
)
from dovimeta.blocks.dm_mode import ExtMetadataBlockLevel254, ExtMetadataBlockLevel255
from dovimeta.blocks.trims import ExtMetadataBlockLevel2, ExtMetadataBlockLevel8
from dovimeta.dm_data import CmV29DmData, CmV40DmData, DmData


def _encode(meta: DmData) -> bytes:
    writer = BitWriter()
    meta.write(writer)
    return writer.to_bytes()


def _v29_sample() -> CmV29DmData:
    meta = CmV29DmData()
    meta.add_block(ExtMetadataBlockLevel6(1000, 1, 3948, 120))
    meta.add_block(ExtMetadataBlockLevel1(0, 2828, 1229))
    meta.add_block(ExtMetadataBlockLevel2(target_max_pq=2851, trim_slope=2059))
    meta.add_block(ExtMetadataBlockLevel2(target_max_pq=2081, ms_weight=-1))
    meta.add_block(ExtMetadataBlockLevel4(100, 200))
    meta.add_block(ExtMetadataBlockLevel5.from_offsets(0, 0, 240, 240))
    meta.add_block(ExtMetadataBlockLevel255(1, 2, 3, 4, 5, 6))
    return meta


def _v40_sample() -> CmV40DmData:
    meta = CmV40DmData.new_with_l254_402()
    meta.add_block(ExtMetadataBlockLevel3(2048, 2048, 1871))
    meta.add_block(ExtMetadataBlockLevel8(length=13, clip_trim=2011))
    meta.add_block(ExtMetadataBlockLevel9.default_dci_p3())
    meta.add_block(ExtMetadataBlockLevel10(target_display_index=20))
    meta.add_block(ExtMetadataBlockLevel11.default_reference_cinema())
    return meta


def test_l254_402_wire_bytes():
    assert _encode(CmV40DmData.new_with_l254_402()) == bytes([0x40, 0x7F, 0xC0, 0x00, 0x40])


def test_v29_round_trip():
    meta = _v29_sample()
    data = _encode(meta)
    parsed = CmV29DmData.parse(BitReader(data))
    assert parsed.num_ext_blocks == len(meta.ext_metadata_blocks)
    assert parsed.ext_metadata_blocks == meta.ext_metadata_blocks
    assert _encode(parsed) == data


def test_v40_round_trip():
    meta = _v40_sample()
    data = _encode(meta)
    parsed = CmV40DmData.parse(BitReader(data))
    assert parsed.ext_metadata_blocks == meta.ext_metadata_blocks
    assert _encode(parsed) == data
    parsed.validate()


@pytest.mark.parametrize("length", [10, 12, 13, 19, 25])
def test_level8_lengths_round_trip(length):
    meta = CmV40DmData.new_with_l254_402()
    meta.add_block(ExtMetadataBlockLevel8(length=length, target_display_index=48))
    parsed = CmV40DmData.parse(BitReader(_encode(meta)))
    l8 = [b for b in parsed.ext_metadata_blocks if b.level() == 8]
    assert l8 == [ExtMetadataBlockLevel8(length=length, target_display_index=48)]


def test_custom_primaries_round_trip():
    l9 = ExtMetadataBlockLevel9(length=17, source_primary_index=255)
    for name in ("red_x", "red_y", "green_x", "green_y", "blue_x", "blue_y", "white_x", "white_y"):
        setattr(l9, f"source_primary_{name}", 1000)
    meta = CmV40DmData.new_with_l254_402()
    meta.add_block(l9)
    parsed = CmV40DmData.parse(BitReader(_encode(meta)))
    assert l9 in parsed.ext_metadata_blocks


@given(
    st.integers(0, 4095),
    st.integers(0, 4095),
    st.integers(0, 4095),
)
def test_level1_round_trip_property(min_pq, max_pq, avg_pq):
    meta = CmV29DmData()
    meta.add_block(ExtMetadataBlockLevel1(min_pq, max_pq, avg_pq))
    parsed = CmV29DmData.parse(BitReader(_encode(meta)))
    assert parsed.ext_metadata_blocks == [ExtMetadataBlockLevel1(min_pq, max_pq, avg_pq)]


def test_add_block_sorts_and_counts():
    meta = CmV29DmData()
    meta.add_block(ExtMetadataBlockLevel6())
    meta.add_block(ExtMetadataBlockLevel1())
    assert [b.level() for b in meta.ext_metadata_blocks] == [1, 6]
    assert meta.num_ext_blocks == 2


def test_add_block_rejects_wrong_level():
    with pytest.raises(RpuError, match="invalid for CM v2.9"):
        CmV29DmData().add_block(ExtMetadataBlockLevel254())
    with pytest.raises(RpuError, match="invalid for CM v4.0"):
        CmV40DmData().add_block(ExtMetadataBlockLevel1())


def test_remove_level():
    meta = _v29_sample()
    meta.remove_level(2)
    assert all(b.level() != 2 for b in meta.ext_metadata_blocks)
    assert meta.num_ext_blocks == len(meta.ext_metadata_blocks)


def test_replace_level2_block():
    meta = _v29_sample()
    before = meta.num_ext_blocks
    meta.replace_level2_block(ExtMetadataBlockLevel2(target_max_pq=2851, trim_slope=2013))
    l2 = [b for b in meta.ext_metadata_blocks if b.level() == 2]
    assert meta.num_ext_blocks == before
    assert [b.target_max_pq for b in l2] == [2081, 2851]
    assert l2[1].trim_slope == 2013

    meta.replace_level2_block(ExtMetadataBlockLevel2(target_max_pq=2400))
    l2 = [b for b in meta.ext_metadata_blocks if b.level() == 2]
    assert [b.target_max_pq for b in l2] == [2081, 2400, 2851]
    assert meta.num_ext_blocks == before + 1


def test_replace_level8_block():
    meta = _v40_sample()
    meta.replace_level8_block(ExtMetadataBlockLevel8(target_display_index=1, trim_slope=2068))
    l8 = [b for b in meta.ext_metadata_blocks if b.level() == 8]
    assert len(l8) == 1
    assert l8[0].trim_slope == 2068
    meta.replace_level8_block(ExtMetadataBlockLevel8(target_display_index=48))
    assert [b.target_display_index for b in meta.ext_metadata_blocks if b.level() == 8] == [1, 48]


def test_replace_level10_block():
    meta = _v40_sample()
    meta.replace_level10_block(ExtMetadataBlockLevel10(target_display_index=20, target_max_pq=3079))
    l10 = [b for b in meta.ext_metadata_blocks if b.level() == 10]
    assert len(l10) == 1
    assert l10[0].target_max_pq == 3079
    meta.replace_level10_block(ExtMetadataBlockLevel10(target_display_index=22))
    assert [b.target_display_index for b in meta.ext_metadata_blocks if b.level() == 10] == [20, 22]


def test_replaced_block_is_a_copy():
    meta = CmV29DmData()
    block = ExtMetadataBlockLevel2(target_max_pq=2081)
    meta.replace_level2_block(block)
    block.trim_slope = 1
    assert meta.ext_metadata_blocks[0].trim_slope == 2048


def test_custom_l254_is_copied():
    l254 = ExtMetadataBlockLevel254(dm_mode=0, dm_version_index=1)
    meta = CmV40DmData.new_with_custom_l254(l254)
    l254.dm_version_index = 2
    assert meta.ext_metadata_blocks == [ExtMetadataBlockLevel254(0, 1)]
    assert meta.num_ext_blocks == 1


def test_v29_validate_limits():
    meta = _v29_sample()
    meta.validate()
    meta.ext_metadata_blocks.append(ExtMetadataBlockLevel1())
    with pytest.raises(RpuError, match="at most one L1"):
        meta.validate()


def test_v29_validate_too_many_l2():
    meta = CmV29DmData()
    for pq in range(2000, 2009):
        meta.add_block(ExtMetadataBlockLevel2(target_max_pq=pq))
    with pytest.raises(RpuError, match="at most 8 L2"):
        meta.validate()


def test_v29_validate_foreign_level():
    meta = CmV29DmData(ext_metadata_blocks=[ExtMetadataBlockLevel3()])
    with pytest.raises(RpuError, match="Only allowed blocks"):
        meta.validate()


def test_v40_validate_requires_l254():
    meta = CmV40DmData()
    meta.add_block(ExtMetadataBlockLevel3())
    with pytest.raises(RpuError, match="one L254"):
        meta.validate()


def test_v40_validate_too_many_l8():
    meta = CmV40DmData.new_with_l254_402()
    for index in range(6):
        meta.add_block(ExtMetadataBlockLevel8(target_display_index=index))
    with pytest.raises(RpuError, match="at most 5 L8"):
        meta.validate()


def test_validate_through_base_class():
    metas: list[DmData] = [_v29_sample(), _v40_sample()]
    for meta in metas:
        meta.validate()
    broken: DmData = CmV40DmData()
    with pytest.raises(RpuError):
        broken.validate()


def test_parse_rejects_foreign_level():
    data = _encode(CmV40DmData.new_with_l254_402())
    with pytest.raises(RpuError, match="Invalid block level 254 for CM v2.9 RPU"):
        CmV29DmData.parse(BitReader(data))


def test_parse_rejects_unknown_level():
    writer = BitWriter()
    writer.write_ue(1)
    writer.byte_align()
    writer.write_ue(1)
    writer.write_bits(7, 8)
    writer.write_bits(0, 8)
    with pytest.raises(RpuError, match="Unknown metadata block"):
        CmV29DmData.parse(BitReader(writer.to_bytes()))


def test_parse_rejects_nonzero_alignment_bit():
    writer = BitWriter()
    writer.write_ue(0)
    writer.write_bit(True)
    writer.byte_align()
    with pytest.raises(RpuError, match="dm_alignment_zero_bit"):
        CmV29DmData.parse(BitReader(writer.to_bytes()))


def test_parse_rejects_wrong_block_length():
    writer = BitWriter()
    writer.write_ue(1)
    writer.byte_align()
    writer.write_ue(6)
    writer.write_bits(1, 8)
    ExtMetadataBlockLevel1(0, 2081, 1229).write(writer)
    writer.write_bits(0, 12)
    with pytest.raises(RpuError, match="should have length 5"):
        CmV29DmData.parse(BitReader(writer.to_bytes()))


def test_parse_rejects_nonzero_block_padding():
    writer = BitWriter()
    writer.write_ue(1)
    writer.byte_align()
    writer.write_ue(5)
    writer.write_bits(1, 8)
    ExtMetadataBlockLevel1(0, 2081, 1229).write(writer)
    writer.write_bits(0b1000, 4)
    with pytest.raises(RpuError, match="ext_dm_alignment_zero_bit"):
        CmV29DmData.parse(BitReader(writer.to_bytes()))


def test_parse_truncated_data_raises():
    data = _encode(_v29_sample())
    with pytest.raises(RpuError):
        CmV29DmData.parse(BitReader(data[:-4]))