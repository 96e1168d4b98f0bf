"""Tests for the 277 claim status response parser."""
from datetime import date
from decimal import Decimal

import pytest

from x12gateway.models.enums import ClaimStatusOutcome
from x12gateway.services.edi.parsers.claim_status_277 import overall_status, parse_277

HEADER = [
    "BHT*0010*08*000000001*20250115*1030*DG",
    "HL*1**20*1",
    "NM1*PR*2*UTAH MEDICAID*****PI*UTMCD",
    "HL*2*1*21*1",
    "NM1*41*2*OFFICE ALLY*****46*330897513",
    "HL*3*2*19*1",
    "NM1*1P*2*WASATCH FAMILY CLINIC*****XX*1234567890",
    "HL*4*3*22*0",
    "NM1*IL*1*DOE*JOHN****MI*0123456789",
]

PAID_CLAIM = [
    "TRN*2*CCN0000001",
    "STC*F1:65*20250120**150*120*****A1:20",
    "REF*1K*PAYER123",
    "REF*D9*CCN0000001",
    "AMT*T3*150",
    "DTP*472*D8*20250110",
]


@pytest.fixture
def paid_277(x12_response):
    return x12_response("277", HEADER + PAID_CLAIM)


@pytest.mark.unit
class TestParse277:
    """Tests for parse_277 on a single paid claim."""

    def test_claim_identity(self, paid_277):
        """Test trace numbers, HL and patient attribution."""
        claim = parse_277(paid_277).claims[0]
        assert claim.trace_number == "CCN0000001"
        assert claim.referenced_trace_numbers == ("CCN0000001",)
        assert claim.hl_id == "4"
        assert claim.patient.last_name == "DOE"
        assert claim.patient.identifier == "0123456789"

    def test_primary_status(self, paid_277):
        """Test the decoded STC01 composite and amounts."""
        status = parse_277(paid_277).claims[0].primary_status
        assert status.category_code == "F1"
        assert status.category_description == "Finalized/Payment"
        assert status.status_code == "65"
        assert status.status_description == "Claim/line has been paid"
        assert status.effective_date == date(2025, 1, 20)
        assert status.amount == Decimal("150.00")
        assert status.payment_amount == Decimal("120.00")
        assert status.is_additional is False

    def test_additional_status(self, paid_277):
        """Test that STC10 becomes an additional status without amounts."""
        statuses = parse_277(paid_277).claims[0].statuses
        assert len(statuses) == 2
        assert statuses[1].category_code == "A1"
        assert statuses[1].is_additional is True
        assert statuses[1].amount is None

    def test_claim_details(self, paid_277):
        """Test REF, AMT and DTP details."""
        claim = parse_277(paid_277).claims[0]
        assert claim.payer_claim_control_number == "PAYER123"
        assert claim.claim_control_number == "CCN0000001"
        assert claim.claim_amount == Decimal("150.00")
        assert claim.service_date == date(2025, 1, 10)

    def test_parties_and_header(self, paid_277):
        """Test payer, receiver, provider and BHT fields."""
        response = parse_277(paid_277)
        assert response.payer.identifier == "UTMCD"
        assert response.information_receiver.last_name == "OFFICE ALLY"
        assert response.provider.identifier == "1234567890"
        assert response.reference_identification == "000000001"
        assert response.transaction_date == date(2025, 1, 15)
        assert response.transaction_control_number == "0001"

    def test_levels(self, paid_277):
        """Test the HL hierarchy."""
        levels = parse_277(paid_277).levels
        assert [level.level_code for level in levels] == ["20", "21", "19", "22"]
        assert levels[3].parent_id == "3"
        assert levels[2].has_children is True
        assert levels[3].has_children is False

    def test_summary(self, paid_277):
        """Test the overall status summary."""
        summary = parse_277(paid_277).summary
        assert summary.overall_status == ClaimStatusOutcome.PAID
        assert summary.counts_by_category == {"F1": 1, "A1": 1}
        assert summary.total_claims == 1
        assert summary.message == "Claim has been paid"

    def test_no_warnings(self, paid_277):
        """Test that known codes produce no warnings."""
        assert parse_277(paid_277).warnings == ()


@pytest.mark.unit
class TestParse277Claims:
    """Tests for claim boundaries."""

    def test_current_trace_opens_each_claim(self, x12_response):
        """Test that every TRN*1 starts a new claim."""
        body = HEADER + [
            "TRN*1*TRACE1",
            "STC*F2:85*20250120",
            "TRN*1*TRACE2",
            "STC*P1:20*20250120",
        ]
        response = parse_277(x12_response("277", body))
        assert [claim.trace_number for claim in response.claims] == ["TRACE1", "TRACE2"]
        assert response.summary.overall_status == ClaimStatusOutcome.DENIED
        assert response.summary.counts_by_category == {"F2": 1, "P1": 1}

    def test_referenced_trace_joins_open_claim(self, x12_response):
        """Test that TRN*2 under the same HL adds to the open claim."""
        body = HEADER + ["TRN*1*TRACE1", "TRN*2*CCN9", "STC*A2:20*20250120"]
        claims = parse_277(x12_response("277", body)).claims
        assert len(claims) == 1
        assert claims[0].trace_number == "TRACE1"
        assert claims[0].referenced_trace_numbers == ("CCN9",)

    def test_claims_under_different_patients(self, x12_response):
        """Test that a TRN*2 under a new HL starts a new claim."""
        body = HEADER + [
            "TRN*2*CCN1",
            "STC*A1:20*20250120",
            "HL*5*3*22*0",
            "NM1*IL*1*ROE*RICHARD****MI*999",
            "TRN*2*CCN2",
            "STC*A1:20*20250120",
        ]
        claims = parse_277(x12_response("277", body)).claims
        assert [claim.trace_number for claim in claims] == ["CCN1", "CCN2"]
        assert claims[1].patient.last_name == "ROE"
        assert claims[1].hl_id == "5"

    def test_patient_under_next_level_waits_for_next_claim(self, x12_response):
        """Test that a patient named under a new HL is not given to the open claim."""
        body = [
            "BHT*0010*08*000000001*20250115*1030*DG",
            "HL*1**20*1",
            "NM1*PR*2*UTAH MEDICAID*****PI*UTMCD",
            "HL*4*1*22*0",
            "TRN*2*CCN1",
            "STC*A1:20*20250120",
            "HL*5*1*22*0",
            "NM1*QC*1*ROE*RICHARD",
            "TRN*2*CCN2",
            "STC*A1:20*20250120",
        ]
        claims = parse_277(x12_response("277", body)).claims
        assert [claim.trace_number for claim in claims] == ["CCN1", "CCN2"]
        assert claims[0].patient is None
        assert claims[1].patient.last_name == "ROE"
        assert claims[1].hl_id == "5"

    def test_detail_outside_claim(self, x12_response):
        """Test that STC without an open claim is skipped with a warning."""
        response = parse_277(x12_response("277", HEADER + ["STC*A1:20*20250120"]))
        assert response.claims == ()
        assert "STC segment outside any claim was ignored" in response.warnings

    def test_no_claims(self, x12_response):
        """Test the summary of a 277 without claims."""
        summary = parse_277(x12_response("277", HEADER)).summary
        assert summary.overall_status == ClaimStatusOutcome.UNKNOWN
        assert summary.message == "No claim status information found"
        assert summary.total_claims == 0

    def test_unknown_status_category(self, x12_response):
        """Test that an unknown category keeps its raw code."""
        response = parse_277(x12_response("277", HEADER + ["TRN*2*CCN1", "STC*Q9:20"]))
        status = response.claims[0].primary_status
        assert status.category_description == "Unknown code: Q9"
        assert "Unknown status category code: Q9" in response.warnings


@pytest.mark.unit
class TestOverallStatus:
    """Tests for the fixed status precedence."""

    @pytest.mark.parametrize(
        "categories,expected",
        [
            (["A1", "F1", "F2"], ClaimStatusOutcome.PAID),
            (["F2", "P1"], ClaimStatusOutcome.DENIED),
            (["P0", "A2"], ClaimStatusOutcome.PENDING),
            (["A2", "A6"], ClaimStatusOutcome.ACKNOWLEDGED),
            (["A6", "A1"], ClaimStatusOutcome.REJECTED),
            (["A1"], ClaimStatusOutcome.RECEIVED),
            (["P2"], ClaimStatusOutcome.UNKNOWN),
            ([], ClaimStatusOutcome.UNKNOWN),
        ],
    )
    def test_precedence(self, categories, expected):
        """Test that the first matching outcome in precedence order wins."""
        assert overall_status(categories) == expected
