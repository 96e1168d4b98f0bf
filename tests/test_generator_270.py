"""Tests for the 270 eligibility inquiry generator."""
import pytest

from x12gateway.models.domain import Provider
from x12gateway.models.enums import EntityType, Gender
from x12gateway.services.edi.envelope import parse_interchange
from x12gateway.services.edi.generators.eligibility_270 import generate_270
from x12gateway.utils.errors import ValidationError
from tests.factories import PatientFactory


def _body(x12):
    return parse_interchange(x12).transaction_segments


def _segment(x12, prefix):
    return [segment for segment in _body(x12) if segment.startswith(prefix)]


@pytest.mark.unit
class TestGenerate270Medicaid:
    """Tests for a 270 addressed to a Medicaid payer."""

    def test_full_transaction(self, patient, medicaid_payer, provider, parties, now):
        """Test the complete segment list for a Medicaid inquiry."""
        x12 = generate_270(patient, medicaid_payer, provider, control_number="000000001", now=now, parties=parties)
        assert _body(x12) == [
            "ST*270*0001*005010X279A1",
            "BHT*0022*13*000000001*20250115*1030",
            "HL*1**20*1",
            "NM1*PR*2*UTAH MEDICAID*****PI*UTMCD",
            "HL*2*1*21*1",
            "NM1*1P*2*WASATCH FAMILY CLINIC*****XX*1234567890",
            "HL*3*2*22*0",
            "TRN*1*000000001*1234567890*ELIGIBILITY",
            "NM1*IL*1*DOE*JOHN****MI*0123456789",
            "DMG*D8*19800115",
            "DTP*291*RD8*20250115-20250115",
            "EQ*30",
            "SE*13*0001",
        ]

    def test_envelope(self, patient, medicaid_payer, provider, parties, now):
        """Test the interchange wrapped around the inquiry."""
        interchange = parse_interchange(
            generate_270(patient, medicaid_payer, provider, control_number="000000042", now=now, parties=parties)
        )
        assert interchange.header.control_number == "000000042"
        assert interchange.header.sender_id == "SENDER01"
        assert interchange.header.receiver_id == "OFFALLY"
        assert interchange.header.usage_indicator == "P"
        assert interchange.functional_group.functional_identifier == "HS"

    def test_gender_omitted_even_when_known(self, patient, medicaid_payer, provider, parties, now):
        """Test that Medicaid never receives DMG03."""
        x12 = generate_270(patient, medicaid_payer, provider, control_number="000000001", now=now, parties=parties)
        assert _segment(x12, "DMG") == ["DMG*D8*19800115"]

    def test_name_only_search(self, medicaid_payer, provider, parties, now):
        """Test a name and DOB search without a member ID."""
        patient = PatientFactory(member_id=None)
        x12 = generate_270(patient, medicaid_payer, provider, control_number="000000001", now=now, parties=parties)
        assert _segment(x12, "NM1*IL") == ["NM1*IL*1*DOE*JOHN"]

    def test_group_number_not_sent(self, medicaid_payer, provider, parties, now):
        """Test that a payer without group number support gets no REF*6P."""
        patient = PatientFactory(group_number="GRP123")
        x12 = generate_270(patient, medicaid_payer, provider, control_number="000000001", now=now, parties=parties)
        assert _segment(x12, "REF") == []

    def test_no_ssn_anywhere(self, patient, medicaid_payer, provider, parties, now):
        """Test that no social security number qualifier is emitted."""
        x12 = generate_270(patient, medicaid_payer, provider, control_number="000000001", now=now, parties=parties)
        assert "REF*SY" not in x12
        assert "*SY*" not in x12


@pytest.mark.unit
class TestGenerate270Commercial:
    """Tests for a 270 addressed to a commercial payer."""

    def test_gender_and_plan_date(self, patient, aetna_payer, provider, parties, now):
        """Test DMG03 and the single-date DTP for a commercial payer."""
        x12 = generate_270(patient, aetna_payer, provider, control_number="000000001", now=now, parties=parties)
        assert _segment(x12, "DMG") == ["DMG*D8*19800115*M"]
        assert _segment(x12, "DTP") == ["DTP*291*D8*20250115"]
        assert _segment(x12, "NM1*PR") == ["NM1*PR*2*AETNA*****PI*60054"]

    def test_group_number_sent(self, aetna_payer, provider, parties, now):
        """Test REF*6P when the payer accepts a group number."""
        patient = PatientFactory(member_id="W123456789", group_number="grp-77")
        x12 = generate_270(patient, aetna_payer, provider, control_number="000000001", now=now, parties=parties)
        assert _segment(x12, "REF") == ["REF*6P*GRP-77"]

    def test_missing_gender_rejected(self, aetna_payer, provider, parties, now):
        """Test that a payer requiring gender rejects a patient without one."""
        patient = PatientFactory(gender=None)
        with pytest.raises(ValidationError) as exc_info:
            generate_270(patient, aetna_payer, provider, control_number="000000001", now=now, parties=parties)
        assert any("gender" in error for error in exc_info.value.errors)

    def test_unknown_gender_rejected(self, aetna_payer, provider, parties, now):
        """Test that U does not satisfy a gender requirement."""
        patient = PatientFactory(gender=Gender.UNKNOWN)
        with pytest.raises(ValidationError):
            generate_270(patient, aetna_payer, provider, control_number="000000001", now=now, parties=parties)


@pytest.mark.unit
class TestGenerate270Validation:
    """Tests for 270 input validation."""

    def test_missing_date_of_birth(self, medicaid_payer, provider, parties, now):
        """Test that DOB is required."""
        patient = PatientFactory(date_of_birth=None)
        with pytest.raises(ValidationError) as exc_info:
            generate_270(patient, medicaid_payer, provider, control_number="000000001", now=now, parties=parties)
        assert "patient.date_of_birth is required" in exc_info.value.errors

    def test_bad_provider_npi(self, patient, medicaid_payer, parties, now):
        """Test that a non 10-digit NPI is rejected."""
        provider = Provider(name="CLINIC", npi="123")
        with pytest.raises(ValidationError) as exc_info:
            generate_270(patient, medicaid_payer, provider, control_number="000000001", now=now, parties=parties)
        assert "provider.npi must be 10 digits" in exc_info.value.errors

    def test_person_provider(self, patient, medicaid_payer, parties, now):
        """Test that an individual provider is sent as NM102=1 with last/first name."""
        provider = Provider(name="Jane Smith", npi="1234567890", entity_type=EntityType.PERSON)
        x12 = generate_270(patient, medicaid_payer, provider, control_number="000000001", now=now, parties=parties)
        assert _segment(x12, "NM1*1P") == ["NM1*1P*1*SMITH*JANE****XX*1234567890"]

    def test_parties_from_settings(self, patient, medicaid_payer, provider, now):
        """Test that envelope parties fall back to settings."""
        interchange = parse_interchange(
            generate_270(patient, medicaid_payer, provider, control_number="000000001", now=now)
        )
        assert interchange.header.sender_id == "SENDER01"
        assert interchange.header.receiver_id == "OFFALLY"
