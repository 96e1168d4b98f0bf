"""Tests for the 276 claim status inquiry generator."""
from datetime import date
from decimal import Decimal

import pytest

from x12gateway.models.enums import Gender
from x12gateway.services.edi.envelope import parse_interchange
from x12gateway.services.edi.generators.claim_status_276 import generate_276, generate_276_batch
from x12gateway.utils.errors import ValidationError
from tests.factories import ClaimInquiryFactory, PatientFactory


def _inquiry(**kwargs):
    defaults = {
        "claim_control_number": "CCN0000001",
        "provider_npi": "1234567890",
        "patient": PatientFactory(member_id="0123456789"),
    }
    defaults.update(kwargs)
    return ClaimInquiryFactory(**defaults)


@pytest.mark.unit
class TestGenerate276:
    """Tests for generate_276."""

    def test_full_transaction(self, parties, now):
        """Test the complete segment list for a subscriber inquiry."""
        x12 = generate_276(_inquiry(), control_number="000000001", now=now, parties=parties)
        assert parse_interchange(x12).transaction_segments == [
            "ST*276*0001*005010X212",
            "BHT*0010*13*000000001*20250115*1030",
            "HL*1**20*1",
            "NM1*PR*2*UTAH MEDICAID*****PI*UTMCD",
            "HL*2*1*21*1",
            "NM1*1P*2*WASATCH FAMILY CLINIC*****XX*1234567890",
            "HL*3*2*22*1",
            "DMG*D8*19800115*M",
            "NM1*IL*1*DOE*JOHN****MI*0123456789",
            "TRN*1*CCN0000001*1234567890",
            "REF*D9*CCN0000001",
            "AMT*T3*150.00",
            "DTP*472*D8*20250110",
            "SE*14*0001",
        ]

    def test_functional_group(self, parties, now):
        """Test GS01 and the implementation guide."""
        group = parse_interchange(
            generate_276(_inquiry(), control_number="000000001", now=now, parties=parties)
        ).functional_group
        assert group.functional_identifier == "HR"
        assert group.version == "005010X212"

    def test_optional_references(self, parties, now):
        """Test payer claim number and patient account references."""
        inquiry = _inquiry(payer_claim_number="PCN-9", patient_account_number="acct1")
        segments = parse_interchange(
            generate_276(inquiry, control_number="000000001", now=now, parties=parties)
        ).transaction_segments
        refs = [segment for segment in segments if segment.startswith("REF")]
        assert refs == ["REF*1K*PCN-9", "REF*EJ*ACCT1", "REF*D9*CCN0000001"]

    def test_amount_and_date_optional(self, parties, now):
        """Test that AMT and DTP are omitted when not supplied."""
        inquiry = _inquiry(claim_amount=None, service_date=None)
        x12 = generate_276(inquiry, control_number="000000001", now=now, parties=parties)
        assert "AMT*T3" not in x12
        assert "DTP*472" not in x12

    def test_dependent_level(self, parties, now):
        """Test the patient level added for a dependent."""
        dependent = PatientFactory(first_name="JANE", gender=Gender.FEMALE, date_of_birth=date(2015, 6, 1))
        segments = parse_interchange(
            generate_276(_inquiry(dependent=dependent), control_number="000000001", now=now, parties=parties)
        ).transaction_segments
        start = segments.index("HL*4*3*23*0")
        assert segments[start + 1] == "DMG*D8*20150601*F"
        assert segments[start + 2] == "NM1*QC*1*DOE*JANE"
        assert segments[start + 3] == "TRN*1*CCN0000001*1234567890"

    def test_accepts_mapping(self, parties, now):
        """Test that a plain mapping is accepted as input."""
        inquiry = {
            "payer_id": "60054",
            "payer_name": "Aetna",
            "provider_npi": "1234567890",
            "provider_name": "Wasatch Family Clinic",
            "claim_control_number": "ABC123",
            "patient": {
                "first_name": "John",
                "last_name": "Doe",
                "date_of_birth": "1980-01-15",
                "member_id": "W999",
            },
            "claim_amount": "75.5",
        }
        x12 = generate_276(inquiry, control_number="000000001", now=now, parties=parties)
        assert "NM1*PR*2*AETNA*****PI*60054~" in x12
        assert "TRN*1*ABC123*1234567890~" in x12
        assert "AMT*T3*75.50~" in x12

    def test_missing_required_fields(self, parties, now):
        """Test that every missing field is reported at once."""
        inquiry = _inquiry(claim_control_number=None, payer_id=None)
        with pytest.raises(ValidationError) as exc_info:
            generate_276(inquiry, control_number="000000001", now=now, parties=parties)
        assert "claim_control_number is required" in exc_info.value.errors
        assert "payer_id is required" in exc_info.value.errors

    def test_member_id_required(self, parties, now):
        """Test that the subscriber member ID is required."""
        inquiry = _inquiry(patient=PatientFactory(member_id=None))
        with pytest.raises(ValidationError) as exc_info:
            generate_276(inquiry, control_number="000000001", now=now, parties=parties)
        assert "patient.member_id is required" in exc_info.value.errors

    def test_negative_amount(self, parties, now):
        """Test that a negative claim amount is rejected."""
        with pytest.raises(ValidationError):
            generate_276(_inquiry(claim_amount=Decimal("-1")), control_number="000000001", now=now, parties=parties)


@pytest.mark.unit
class TestGenerate276Batch:
    """Tests for generate_276_batch."""

    def test_one_set_per_inquiry(self, parties, now):
        """Test that each inquiry gets its own ST/SE with sequential control numbers."""
        x12 = generate_276_batch(
            [_inquiry(claim_control_number="CCN1"), _inquiry(claim_control_number="CCN2")],
            control_number="000000005",
            now=now,
            parties=parties,
        )
        group = parse_interchange(x12).functional_group
        assert [ts.control_number for ts in group.transaction_sets] == ["0001", "0002"]
        assert group.transaction_sets[0].segments[1] == "BHT*0010*13*0000000050001*20250115*1030"
        assert "TRN*1*CCN2*1234567890" in group.transaction_sets[1].segments

    def test_empty_batch(self, parties, now):
        """Test that an empty batch is rejected."""
        with pytest.raises(ValidationError):
            generate_276_batch([], control_number="000000001", now=now, parties=parties)

    def test_errors_identify_inquiry(self, parties, now):
        """Test that batch validation errors name the failing inquiry."""
        with pytest.raises(ValidationError) as exc_info:
            generate_276_batch(
                [_inquiry(), _inquiry(claim_control_number=None)],
                control_number="000000001",
                now=now,
                parties=parties,
            )
        assert "inquiry[2]: claim_control_number is required" in exc_info.value.errors
