"""Tests for the 271 eligibility response parser."""
from datetime import date
from decimal import Decimal

import pytest

from x12gateway.services.edi.parsers.eligibility_271 import parse_271, summarize_benefits
from x12gateway.utils.errors import MalformedEnvelope

HEADER = [
    "BHT*0022*11*000000001*20250115*1030",
    "HL*1**20*1",
    "NM1*PR*2*UTAH MEDICAID*****PI*UTMCD",
    "HL*2*1*21*1",
    "NM1*1P*2*WASATCH FAMILY CLINIC*****XX*1234567890",
    "HL*3*2*22*0",
    "TRN*2*000000001*1234567890",
    "NM1*IL*1*DOE*JOHN****MI*0123456789",
    "N3*123 MAIN ST",
    "N4*SALT LAKE CITY*UT*84101",
    "DMG*D8*19800115*M",
    "DTP*291*D8*20250115",
]

BENEFITS = [
    "EB*1*IND*30*MC*TARGETED ADULT MEDICAID",
    "DTP*291*RD8*20250101-20251231",
    "EB*1*IND*MH*MC*MENTAL HEALTH PREPAID",
    "MSG*MENTAL HEALTH SERVICES CARVED OUT",
    "EB*A*IND*98^BY***27*25",
    "EB*C*IND*30***23*500",
    "EB*G*IND*30***23*3000",
    "EB*B*IND*30*****0.20",
]


@pytest.fixture
def eligibility_271(x12_response):
    return x12_response("271", HEADER + BENEFITS)


@pytest.mark.unit
class TestParse271:
    """Tests for parse_271 on an active coverage response."""

    def test_enrolled(self, eligibility_271):
        """Test that any EB segment means enrolled."""
        response = parse_271(eligibility_271)
        assert response.enrolled is True
        assert response.error is None
        assert len(response.benefits) == 6

    def test_every_active_plan_kept(self, eligibility_271):
        """Test that all EB*1 plan descriptions are reported."""
        response = parse_271(eligibility_271)
        assert response.active_plan_descriptions == ["TARGETED ADULT MEDICAID", "MENTAL HEALTH PREPAID"]
        assert response.has_active_coverage is True

    def test_benefit_fields(self, eligibility_271):
        """Test decoded EB fields."""
        benefit = parse_271(eligibility_271).benefits[0]
        assert benefit.eligibility_code == "1"
        assert benefit.eligibility_description == "Active Coverage"
        assert benefit.coverage_level_description == "Individual"
        assert benefit.service_type_codes == ("30",)
        assert benefit.service_type_descriptions == ("Health Benefit Plan Coverage",)
        assert benefit.insurance_type_description == "Medicaid"
        assert benefit.raw == "EB*1*IND*30*MC*TARGETED ADULT MEDICAID"

    def test_benefit_children(self, eligibility_271):
        """Test that DTP and MSG attach to the preceding EB."""
        response = parse_271(eligibility_271)
        dates = response.benefits[0].dates
        assert dates[0].start == date(2025, 1, 1)
        assert dates[0].end == date(2025, 12, 31)
        assert response.benefits[1].messages == ("MENTAL HEALTH SERVICES CARVED OUT",)
        assert "MENTAL HEALTH SERVICES CARVED OUT" in response.messages

    def test_parties(self, eligibility_271):
        """Test payer and information receiver names."""
        response = parse_271(eligibility_271)
        assert response.payer.display_name == "UTAH MEDICAID"
        assert response.payer.identifier == "UTMCD"
        assert response.information_receiver.identifier == "1234567890"

    def test_subscriber(self, eligibility_271):
        """Test subscriber demographics."""
        patient = parse_271(eligibility_271).patient
        assert patient.last_name == "DOE"
        assert patient.first_name == "JOHN"
        assert patient.member_id == "0123456789"
        assert patient.date_of_birth == date(1980, 1, 15)
        assert patient.gender == "M"
        assert patient.address == "123 MAIN ST"
        assert patient.city == "SALT LAKE CITY"
        assert patient.dates[0].qualifier == "291"

    def test_trace_and_control_number(self, eligibility_271):
        """Test TRN trace numbers and ST02."""
        response = parse_271(eligibility_271)
        assert response.trace_numbers == ("000000001",)
        assert response.transaction_control_number == "0001"

    def test_no_warnings_for_known_codes(self, eligibility_271):
        """Test that a response with known codes has no warnings."""
        assert parse_271(eligibility_271).warnings == ()


@pytest.mark.unit
class TestBenefitSummary:
    """Tests for copay, deductible, out-of-pocket and coinsurance extraction."""

    def test_copay_for_every_service_type(self, eligibility_271):
        """Test that one EB contributes a copay to each EB03 service type."""
        summary = parse_271(eligibility_271).summary
        assert set(summary.copays) == {"98", "BY"}
        assert summary.copay_for("98") == Decimal("25.00")
        assert summary.copay_for("BY") == Decimal("25.00")
        assert summary.has_copay is True

    def test_deductible_out_of_pocket_coinsurance(self, eligibility_271):
        """Test the other benefit buckets."""
        summary = parse_271(eligibility_271).summary
        assert summary.deductibles["30"][0].amount == Decimal("500.00")
        assert summary.deductibles["30"][0].time_period == "23"
        assert summary.out_of_pocket["30"][0].amount == Decimal("3000.00")
        assert summary.coinsurance["30"][0].percentage == Decimal("0.20")

    def test_many_service_types(self, x12_response):
        """Test a copay listed against several service types at once."""
        response = parse_271(x12_response("271", HEADER + ["EB*A*IND*98^UC^86***27*40"]))
        assert set(response.summary.copays) == {"98", "UC", "86"}

    def test_zero_copay_ignored(self, x12_response):
        """Test that a zero amount is not a copay."""
        response = parse_271(x12_response("271", HEADER + ["EB*A*IND*98***27*0"]))
        assert response.summary.copays == {}
        assert response.summary.has_copay is False

    def test_no_service_type_keys_under_plan_coverage(self, x12_response):
        """Test that an EB without EB03 is keyed under 30."""
        response = parse_271(x12_response("271", HEADER + ["EB*C*IND****23*250"]))
        assert list(response.summary.deductibles) == ["30"]

    def test_summarize_empty(self):
        """Test summarizing no benefits."""
        summary = summarize_benefits([])
        assert summary.copays == {}
        assert summary.copay_for("98") is None


@pytest.mark.unit
class TestParse271Rejections:
    """Tests for responses without benefits."""

    def test_aaa_rejection(self, x12_response):
        """Test that AAA without EB reports the reject reason."""
        body = HEADER[:8] + ["AAA*N**75*C"]
        response = parse_271(x12_response("271", body))
        assert response.enrolled is False
        assert response.error == "Eligibility request rejected: Subscriber/Insured Not Found"
        assert response.rejections[0].code == "75"
        assert response.rejections[0].follow_up_description == "Please Correct and Resubmit"

    def test_no_information(self, x12_response):
        """Test a response with neither EB nor AAA."""
        response = parse_271(x12_response("271", HEADER))
        assert response.enrolled is False
        assert response.error == "Unable to determine eligibility status"

    def test_unknown_codes_become_warnings(self, x12_response):
        """Test that an unknown service type keeps the raw code."""
        response = parse_271(x12_response("271", HEADER + ["EB*1*IND*ZZ9"]))
        assert response.benefits[0].service_type_descriptions == ("Unknown code: ZZ9",)
        assert "Unknown service type code: ZZ9" in response.warnings


@pytest.mark.unit
class TestParse271Structure:
    """Tests for loop handling and envelope checks."""

    def test_related_entity_loop(self, x12_response):
        """Test that an LS/LE 2120 loop attaches its entity to the benefit."""
        body = HEADER + [
            "EB*1*IND*30*HM*MC INTEGRATED",
            "LS*2120",
            "NM1*Y2*2*MOLINA HEALTHCARE*****PI*2000001",
            "N3*PO BOX 22630",
            "N4*LONG BEACH*CA*90801",
            "PER*IC**TE*8004694207",
            "LE*2120",
            "EB*A*IND*98***27*10",
        ]
        response = parse_271(x12_response("271", body))
        assert len(response.benefits) == 2
        entity = response.benefits[0].related_entities[0]
        assert entity.name == "MOLINA HEALTHCARE"
        assert entity.payer_id == "2000001"
        assert entity.city == "LONG BEACH"
        assert entity.contacts[0].value == "8004694207"
        assert response.coordination_of_benefits.has_other_insurance is True

    def test_dependent_replaces_subscriber(self, x12_response):
        """Test that a dependent NM1 becomes the patient of record."""
        body = HEADER + ["HL*4*3*23*0", "NM1*03*1*DOE*JANE", "DMG*D8*20150601*F", "EB*1*IND*30"]
        patient = parse_271(x12_response("271", body)).patient
        assert patient.first_name == "JANE"
        assert patient.date_of_birth == date(2015, 6, 1)

    def test_bare_transaction(self):
        """Test a transaction without ISA/GS envelopes."""
        response = parse_271("ST*271*0001~EB*1*IND*30~SE*3*0001~")
        assert response.enrolled is True

    def test_mismatched_control_numbers(self, eligibility_271):
        """Test that a corrupted interchange trailer is rejected."""
        with pytest.raises(MalformedEnvelope):
            parse_271(eligibility_271.replace("IEA*1*000000001", "IEA*1*000000002"))
