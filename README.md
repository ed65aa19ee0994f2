# dovimeta

`dovimeta` reads, validates and writes two parts of a Dolby Vision RPU. The first is the RPU
data header. The second is the display-management extension metadata, made of blocks of
levels 1 to 6, 8 to 11, 254 and 255. Each block is checked against the limits the format
sets before it is written.

## Installation

```
pip install .
```

To install the test requirements as well:

```
pip install ".[test]"
```

## Modules

- `dovimeta.bitstream`
  - `BitReader` reads MSB-first bit fields. Its methods are `read_bit`, `read_bits`, `read_ue` (Exp-Golomb), `is_aligned` and `bits_remaining`.
  - `BitWriter` writes them. Its methods are `write_bit`, `write_bits`, `write_signed_bits`, `write_ue`, `byte_align`, `is_aligned` and `to_bytes`.
  - `RpuError` (a `ValueError`) is raised for malformed data, values out of range and reads past the end of the data.
- `dovimeta.conversion`
  - `ConversionMode` lists the conversion modes. `ConversionMode.from_value` maps a numeric mode to a member: 0 is lossless, 1 is to MEL, 2 and 3 are to 8.1, 4 is to 8.4, and any other value is lossless.
  - `compute_crc32` computes the CRC-32/MPEG-2 checksum.
- `dovimeta.primaries`
  - `MasteringDisplayPrimaries` lists the preset colour spaces. `from_name` accepts either the member name or an alias such as `"BT.2020"`.
  - `ColorPrimaries` can be built with `from_array_int`, `from_array_float` or `from_enum`.
  - `f64_to_integer_primaries` scales chromaticities to units of 1/32767.
- `dovimeta.header` holds `RpuDataHeader`.
  - `parse`, `write` and `validate(profile)` read, write and check a header.
  - `dovi_profile()` returns the profile the header implies.
  - `p5_default()` and `p8_default()` return default headers.
- `dovimeta.blocks` holds the extension metadata blocks. Every block has `level()`, `length_bytes()`, `required_bits()`, `sort_key()` and `write(writer)`. Blocks with limits also have `validate()`.
  - `blocks.base.ExtMetadataBlock` is the common base class.
  - `blocks.brightness` has `CmVersion` and the brightness blocks:
    - `ExtMetadataBlockLevel1`, whose `from_stats_cm_version` and `clamp_values_cm_version` clamp values into range.
    - `ExtMetadataBlockLevel3`.
    - `ExtMetadataBlockLevel4`.
    - `ExtMetadataBlockLevel6`, whose `source_meta_from_l6` derives the source PQ range.
  - `blocks.trims` has the trim blocks:
    - `ExtMetadataBlockLevel2`.
    - `ExtMetadataBlockLevel8`, with a length of 10, 12, 13, 19 or 25 bytes.
  - `blocks.display` has the display blocks:
    - `ExtMetadataBlockLevel5`, the active-area offsets.
    - `ExtMetadataBlockLevel9`, the source primaries.
    - `ExtMetadataBlockLevel10`, the custom target display.
    - `ExtMetadataBlockLevel11`, the content type.
  - `blocks.dm_mode` has `ExtMetadataBlockLevel254` and `ExtMetadataBlockLevel255`.
  - `blocks.reserved` has `ReservedExtMetadataBlock`, a block of unknown level kept as raw bits. It cannot be written.
  - The variable-length blocks (levels 8, 9 and 10) also have `to_dict()`. It returns only the fields present for the block's length.
- `dovimeta.dm_data` holds `CmV29DmData` and `CmV40DmData`, the block lists for content mapping v2.9 and v4.0.
  - `parse`, `add_block`, `remove_level`, `write` and `validate` read, change, write and check a list.
  - Version 2.9 also has `replace_level2_block`.
  - Version 4.0 also has `replace_level8_block`, `replace_level10_block`, `new_with_l254_402` and `new_with_custom_l254`.

## Examples

Write a default profile 8 header and read it back:

```python
from dovimeta.bitstream import BitReader, BitWriter
from dovimeta.header import RpuDataHeader

writer = BitWriter()
RpuDataHeader.p8_default().write(writer)
writer.byte_align()

parsed = RpuDataHeader.parse(BitReader(writer.to_bytes()))
assert parsed.dovi_profile() == 8
```

Build a level 1 block from frame statistics. Its values are clamped to the valid range:

```python
from dovimeta.blocks.brightness import CmVersion, ExtMetadataBlockLevel1

l1 = ExtMetadataBlockLevel1.from_stats_cm_version(0, 1000, 500, CmVersion.V40)
assert (l1.min_pq, l1.max_pq, l1.avg_pq) == (0, 2081, 1229)
```

Build CM v4.0 metadata, write it and parse it again:

```python
from dovimeta.bitstream import BitReader, BitWriter
from dovimeta.blocks.display import ExtMetadataBlockLevel11
from dovimeta.dm_data import CmV40DmData

meta = CmV40DmData.new_with_l254_402()
meta.add_block(ExtMetadataBlockLevel11.default_reference_cinema())
meta.validate()

writer = BitWriter()
meta.write(writer)
again = CmV40DmData.parse(BitReader(writer.to_bytes()))
assert [b.level() for b in again.ext_metadata_blocks] == [11, 254]
```

## What it does not do

`dovimeta` is a library with no command-line program. It does not cover these:

- Whole RPUs. It does not handle the mapping, NLQ or colour-conversion parts of the payload, or the CRC-framed NAL unit around them.
- Video files. It does not read or write HEVC or MKV files.
- Changing RPUs in bulk. It cannot extract, inject, convert, edit or generate RPUs, and it cannot plot metadata.

## Running the tests

```
pytest
```