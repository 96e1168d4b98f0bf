"""Tests for ISA/GS/ST envelope building and verification."""
from datetime import datetime

import pytest

from x12gateway.services.edi.envelope import (
    build_interchange,
    build_transaction_set,
    clock_control_number,
    interchange_timestamps,
    pad_interchange_id,
    parse_interchange,
    verify_envelope,
)
from x12gateway.services.edi.grammar import parse_segments, split_elements, split_segments
from x12gateway.utils.errors import MalformedEnvelope, ValidationError


def _interchange(body=("BHT*0022*13*X",), control_number="000000123", now=None):
    transaction = build_transaction_set("270", list(body))
    return build_interchange(
        sender_id="SENDER01",
        receiver_id="OFFALLY",
        control_number=control_number,
        usage_indicator="P",
        transaction_segments=transaction,
        functional_identifier="HS",
        version="005010X279A1",
        now=now or datetime(2025, 1, 15, 10, 30),
    )


@pytest.mark.unit
class TestBuildTransactionSet:
    """Tests for build_transaction_set."""

    def test_se_count_includes_st_and_se(self):
        """Test that SE01 counts ST through SE inclusive."""
        segments = build_transaction_set("270", ["BHT*0022*13", "HL*1**20*1"])
        assert segments[0] == "ST*270*0001*005010X279A1"
        assert segments[-1] == "SE*4*0001"

    def test_custom_control_number(self):
        """Test that ST02 and SE02 carry the same control number."""
        segments = build_transaction_set("276", [], control_number="0002")
        assert segments == ["ST*276*0002*005010X212", "SE*2*0002"]


@pytest.mark.unit
class TestBuildInterchange:
    """Tests for build_interchange."""

    def test_isa_is_fixed_width(self):
        """Test that ISA has 16 elements and padded IDs."""
        isa = split_elements(split_segments(_interchange())[0])
        assert len(isa) == 17
        assert isa[6] == "SENDER01".ljust(15)
        assert isa[8] == "OFFALLY".ljust(15)
        assert isa[11] == "^"
        assert isa[16] == ":"

    def test_local_timestamps(self):
        """Test that ISA09/ISA10 and GS04/GS05 use the given wall clock."""
        segments = parse_segments(_interchange(now=datetime(2025, 1, 15, 22, 45)))
        isa, gs = segments[0], segments[1]
        assert isa[9] == "250115"
        assert isa[10] == "2245"
        assert gs[4] == "20250115"
        assert gs[5] == "2245"

    def test_control_numbers_match(self):
        """Test ISA13 == IEA02 and GS06 == GE02."""
        segments = parse_segments(_interchange(control_number="000000777"))
        isa, gs, ge, iea = segments[0], segments[1], segments[-2], segments[-1]
        assert isa[13] == iea[2] == "000000777"
        assert gs[6] == ge[2]
        assert ge[1] == "1"
        assert iea[1] == "1"

    def test_gs_identifies_transaction(self):
        """Test GS01 and GS08."""
        gs = parse_segments(_interchange())[1]
        assert gs[1] == "HS"
        assert gs[8] == "005010X279A1"

    def test_rejects_short_control_number(self):
        """Test that a control number must be 9 digits."""
        with pytest.raises(ValidationError):
            _interchange(control_number="123")

    def test_rejects_bad_usage_indicator(self):
        """Test that only P and T are accepted."""
        with pytest.raises(ValidationError):
            build_interchange("A", "B", "000000001", "X", [], "HS", "005010X279A1")

    def test_parses_back(self):
        """Test that a built interchange passes full verification."""
        interchange = parse_interchange(_interchange())
        assert interchange.header.sender_id == "SENDER01"
        assert interchange.functional_group.functional_identifier == "HS"
        assert interchange.functional_group.transaction_sets[0].transaction_set_id == "270"
        assert interchange.transaction_segments[0].startswith("ST*270")


@pytest.mark.unit
class TestHelpers:
    """Tests for envelope helpers."""

    def test_clock_control_number_is_nine_digits(self):
        """Test the clock-derived control number format."""
        value = clock_control_number()
        assert len(value) == 9
        assert value.isdigit()

    def test_interchange_timestamps(self):
        """Test timestamp formats."""
        assert interchange_timestamps(datetime(2025, 3, 4, 5, 6)) == ("250304", "0506", "20250304")

    def test_pad_interchange_id_too_long(self):
        """Test that IDs over 15 characters are rejected."""
        with pytest.raises(ValidationError):
            pad_interchange_id("X" * 16)

    def test_pad_interchange_id_blank(self):
        """Test that a blank ID is rejected."""
        with pytest.raises(ValidationError):
            pad_interchange_id("  ")


@pytest.mark.unit
class TestParseInterchange:
    """Tests for parse_interchange invariants."""

    def test_mismatched_iea(self):
        """Test that ISA13 != IEA02 is rejected."""
        raw = _interchange().replace("IEA*1*000000123", "IEA*1*000000999")
        with pytest.raises(MalformedEnvelope):
            parse_interchange(raw)

    def test_bad_se_count(self):
        """Test that a wrong SE01 is rejected."""
        raw = _interchange().replace("SE*3*0001", "SE*9*0001")
        with pytest.raises(MalformedEnvelope):
            parse_interchange(raw)

    def test_missing_iea(self):
        """Test that a missing IEA trailer is rejected."""
        raw = _interchange().split("IEA*")[0]
        with pytest.raises(MalformedEnvelope):
            parse_interchange(raw)

    def test_not_starting_with_isa(self):
        """Test that input must start with ISA."""
        with pytest.raises(MalformedEnvelope):
            parse_interchange("ST*270*0001~SE*2*0001~")


@pytest.mark.unit
class TestVerifyEnvelope:
    """Tests for verify_envelope."""

    def test_bare_transaction_passes(self):
        """Test that a fragment without ISA/GS is accepted."""
        verify_envelope(parse_segments("ST*271*0001~BHT*0022*11~SE*3*0001~"))

    def test_bare_transaction_bad_count(self):
        """Test that SE01 is checked even without an interchange."""
        with pytest.raises(MalformedEnvelope):
            verify_envelope(parse_segments("ST*271*0001~BHT*0022*11~SE*5*0001~"))

    def test_st_se_control_mismatch(self):
        """Test that ST02 != SE02 is rejected."""
        with pytest.raises(MalformedEnvelope):
            verify_envelope(parse_segments("ST*271*0001~SE*2*0002~"))

    def test_unpaired_gs(self):
        """Test that a GS without GE is rejected."""
        with pytest.raises(MalformedEnvelope):
            verify_envelope(parse_segments("GS*HB*A*B*20250115*1030*1*X*005010X279A1~ST*271*0001~SE*2*0001~"))

    def test_full_interchange_passes(self):
        """Test that a complete interchange verifies."""
        verify_envelope(parse_segments(_interchange()))
