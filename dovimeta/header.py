"""The RPU data header."""

from __future__ import annotations

from dataclasses import dataclass

from dovimeta.bitstream import BitReader, BitWriter, RpuError


@dataclass
class RpuDataHeader:
    """Fields of the RPU data header."""

    rpu_type: int = 0
    rpu_format: int = 0
    vdr_rpu_profile: int = 0
    vdr_rpu_level: int = 0
    vdr_seq_info_present_flag: bool = False
    chroma_resampling_explicit_filter_flag: bool = False
    coefficient_data_type: int = 0
    coefficient_log2_denom: int = 0
    coefficient_log2_denom_length: int = 0
    vdr_rpu_normalized_idc: int = 0
    bl_video_full_range_flag: bool = False
    bl_bit_depth_minus8: int = 0
    el_bit_depth_minus8: int = 0
    ext_mapping_idc_0_4: int = 0
    ext_mapping_idc_5_7: int = 0
    vdr_bit_depth_minus8: int = 0
    spatial_resampling_filter_flag: bool = False
    reserved_zero_3bits: int = 0
    el_spatial_resampling_filter_flag: bool = False
    disable_residual_flag: bool = False
    vdr_dm_metadata_present_flag: bool = False
    use_prev_vdr_rpu_flag: bool = False
    prev_vdr_rpu_id: int = 0

    @classmethod
    def parse(cls, reader: BitReader) -> "RpuDataHeader":
        """Read a header from the bitstream."""
        rpu_type = reader.read_bits(6)
        if rpu_type != 2:
            raise RpuError(f"Invalid rpu_type value: {rpu_type}")

        header = cls(
            rpu_type=rpu_type,
            rpu_format=reader.read_bits(11),
            vdr_rpu_profile=reader.read_bits(4),
            vdr_rpu_level=reader.read_bits(4),
            vdr_seq_info_present_flag=reader.read_bit(),
        )

        if header.vdr_seq_info_present_flag:
            header.chroma_resampling_explicit_filter_flag = reader.read_bit()
            header.coefficient_data_type = reader.read_bits(2)

            if header.coefficient_data_type == 0:
                header.coefficient_log2_denom = reader.read_ue()

            header.vdr_rpu_normalized_idc = reader.read_bits(2)
            header.bl_video_full_range_flag = reader.read_bit()

            if header.rpu_format & 0x700 == 0:
                header.bl_bit_depth_minus8 = reader.read_ue()

                el_bit_depth_minus8 = reader.read_ue()
                header.el_bit_depth_minus8 = el_bit_depth_minus8 & 0xFF
                ext_mapping_idc = (el_bit_depth_minus8 >> 8) & 0xFF
                header.ext_mapping_idc_0_4 = ext_mapping_idc & 0x1F
                header.ext_mapping_idc_5_7 = ext_mapping_idc >> 5

                header.vdr_bit_depth_minus8 = reader.read_ue()
                header.spatial_resampling_filter_flag = reader.read_bit()
                header.reserved_zero_3bits = reader.read_bits(3)
                header.el_spatial_resampling_filter_flag = reader.read_bit()
                header.disable_residual_flag = reader.read_bit()

            if header.coefficient_data_type == 0:
                header.coefficient_log2_denom_length = header.coefficient_log2_denom
            elif header.coefficient_data_type == 1:
                header.coefficient_log2_denom_length = 32
            else:
                raise RpuError(
                    f"Invalid coefficient_data_type value: {header.coefficient_data_type}"
                )

        header.vdr_dm_metadata_present_flag = reader.read_bit()
        header.use_prev_vdr_rpu_flag = reader.read_bit()
        if header.use_prev_vdr_rpu_flag:
            header.prev_vdr_rpu_id = reader.read_ue()

        return header

    def validate(self, profile: int) -> None:
        """Check the header against the constraints of a Dolby Vision profile."""
        if profile == 5:
            if self.vdr_rpu_profile != 0:
                raise RpuError("profile 5: vdr_rpu_profile should be 0")
            if not self.bl_video_full_range_flag:
                raise RpuError("profile 5: bl_video_full_range_flag should be true")
        elif profile in (7, 8) and self.vdr_rpu_profile != 1:
            raise RpuError(f"profile {profile}: vdr_rpu_profile should be 1")

        if self.vdr_rpu_level != 0:
            raise RpuError("vdr_rpu_level should be 0")
        if self.bl_bit_depth_minus8 != 2:
            raise RpuError("bl_bit_depth_minus8 should be 2")
        if self.el_bit_depth_minus8 != 2:
            raise RpuError("el_bit_depth_minus8 should be 2")
        if self.vdr_bit_depth_minus8 > 6:
            raise RpuError("vdr_bit_depth_minus8 should be <= 6")
        if self.coefficient_log2_denom > 23:
            raise RpuError("coefficient_log2_denom should be <= 23")

    def dovi_profile(self) -> int:
        """The Dolby Vision profile implied by the header, or 0 if unknown."""
        if self.vdr_rpu_profile == 0:
            return 5 if self.bl_video_full_range_flag else 0
        if self.vdr_rpu_profile == 1:
            if self.el_spatial_resampling_filter_flag and not self.disable_residual_flag:
                return 7 if self.vdr_bit_depth_minus8 == 4 else 4
            return 8
        return 0

    def write(self, writer: BitWriter) -> None:
        """Write the header to the bitstream."""
        writer.write_bits(self.rpu_type, 6)
        writer.write_bits(self.rpu_format, 11)
        writer.write_bits(self.vdr_rpu_profile, 4)
        writer.write_bits(self.vdr_rpu_level, 4)
        writer.write_bit(self.vdr_seq_info_present_flag)

        if self.vdr_seq_info_present_flag:
            writer.write_bit(self.chroma_resampling_explicit_filter_flag)
            writer.write_bits(self.coefficient_data_type, 2)

            if self.coefficient_data_type == 0:
                writer.write_ue(self.coefficient_log2_denom)

            writer.write_bits(self.vdr_rpu_normalized_idc, 2)
            writer.write_bit(self.bl_video_full_range_flag)

            if self.rpu_format & 0x700 == 0:
                writer.write_ue(self.bl_bit_depth_minus8)

                ext_mapping_idc = (
                    (self.ext_mapping_idc_5_7 << 5) | self.ext_mapping_idc_0_4
                ) & 0xFF
                writer.write_ue((ext_mapping_idc << 8) | self.el_bit_depth_minus8)

                writer.write_ue(self.vdr_bit_depth_minus8)
                writer.write_bit(self.spatial_resampling_filter_flag)
                writer.write_bits(self.reserved_zero_3bits, 3)
                writer.write_bit(self.el_spatial_resampling_filter_flag)
                writer.write_bit(self.disable_residual_flag)

        writer.write_bit(self.vdr_dm_metadata_present_flag)
        writer.write_bit(self.use_prev_vdr_rpu_flag)

        if self.use_prev_vdr_rpu_flag:
            writer.write_ue(self.prev_vdr_rpu_id)

    @classmethod
    def p5_default(cls) -> "RpuDataHeader":
        """Default header for a profile 5 RPU."""
        header = cls.p8_default()
        header.vdr_rpu_profile = 0
        header.bl_video_full_range_flag = True
        return header

    @classmethod
    def p8_default(cls) -> "RpuDataHeader":
        """Default header for a profile 8 RPU."""
        return cls(
            rpu_type=2,
            rpu_format=18,
            vdr_rpu_profile=1,
            vdr_rpu_level=0,
            vdr_seq_info_present_flag=True,
            chroma_resampling_explicit_filter_flag=False,
            coefficient_data_type=0,
            coefficient_log2_denom=23,
            coefficient_log2_denom_length=23,
            vdr_rpu_normalized_idc=1,
            bl_video_full_range_flag=False,
            bl_bit_depth_minus8=2,
            el_bit_depth_minus8=2,
            vdr_bit_depth_minus8=4,
            spatial_resampling_filter_flag=False,
            reserved_zero_3bits=0,
            el_spatial_resampling_filter_flag=False,
            disable_residual_flag=True,
            vdr_dm_metadata_present_flag=True,
            use_prev_vdr_rpu_flag=False,
            prev_vdr_rpu_id=0,
        )