"""Tests for response classification."""
import pytest

from x12gateway.models.enums import ResponseType
from x12gateway.services.edi.parsers.detector import classify_response


@pytest.mark.unit
class TestClassifyResponse:
    """Tests for classify_response."""

    @pytest.mark.parametrize(
        "transaction_set_id,expected",
        [
            ("271", ResponseType.ELIGIBILITY_271),
            ("277", ResponseType.CLAIM_STATUS_277),
            ("835", ResponseType.REMITTANCE_835),
            ("999", ResponseType.ACKNOWLEDGMENT_999),
            ("997", ResponseType.ACKNOWLEDGMENT_999),
        ],
    )
    def test_by_transaction_set(self, x12_response, transaction_set_id, expected):
        """Test that ST01 decides the response type."""
        assert classify_response(x12_response(transaction_set_id, ["BHT*0022*11"])) == expected

    def test_unknown_transaction_set(self):
        """Test an ST01 this library does not read."""
        assert classify_response("ST*850*0001~BEG*00~SE*3*0001~") == ResponseType.UNKNOWN

    def test_functional_group_fallback(self):
        """Test GS01 when no ST segment is present."""
        assert classify_response("GS*HN*OFFALLY*SENDER01*20250115*1030*1*X*005010X212~GE*0*1~") == (
            ResponseType.CLAIM_STATUS_277
        )

    @pytest.mark.parametrize("raw", ["", None, "not x12 at all"])
    def test_empty_or_garbage(self, raw):
        """Test input without ST or GS."""
        assert classify_response(raw) == ResponseType.UNKNOWN
