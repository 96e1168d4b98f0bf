"""Pytest configuration and shared fixtures."""
from datetime import datetime
from typing import Optional, Sequence

import pytest

from x12gateway.config.payers import PayerDirectory
from x12gateway.config.settings import InterchangeParties, reset_settings
from x12gateway.models.domain import Provider
from x12gateway.models.enums import EntityType
from x12gateway.services.edi.envelope import (
    FUNCTIONAL_IDENTIFIERS,
    IMPLEMENTATION_GUIDES,
    build_interchange,
    build_transaction_set,
)
from tests.factories import PatientFactory

TEST_SENDER_ID = "SENDER01"
TEST_RECEIVER_ID = "OFFALLY"
FIXED_NOW = datetime(2025, 1, 15, 10, 30)


@pytest.fixture(autouse=True)
def clearinghouse_env(monkeypatch):
    """Known clearinghouse settings for every test; cached settings are dropped around it."""
    monkeypatch.setenv("X12_SENDER_ID", TEST_SENDER_ID)
    monkeypatch.setenv("X12_RECEIVER_ID", TEST_RECEIVER_ID)
    monkeypatch.setenv("CLEARINGHOUSE_USERNAME", "testuser")
    monkeypatch.setenv("CLEARINGHOUSE_PASSWORD", "testpass")
    monkeypatch.setenv("CLEARINGHOUSE_ENDPOINT", "https://clearinghouse.test/rtx")
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def parties():
    return InterchangeParties(sender_id=TEST_SENDER_ID, receiver_id=TEST_RECEIVER_ID)


@pytest.fixture
def payers():
    return PayerDirectory()


@pytest.fixture
def medicaid_payer(payers):
    return payers.get("UTMCD")


@pytest.fixture
def aetna_payer(payers):
    return payers.get("60054")


@pytest.fixture
def provider():
    return Provider(
        name="WASATCH FAMILY CLINIC",
        npi="1234567890",
        entity_type=EntityType.ORGANIZATION,
    )


@pytest.fixture
def patient():
    return PatientFactory(member_id="0123456789")


def build_response(
    transaction_set_id: str,
    body: Sequence[str],
    control_number: str = "000000001",
    set_control_number: str = "0001",
    now: Optional[datetime] = None,
) -> str:
    """A clearinghouse-side interchange carrying one transaction set."""
    transaction = build_transaction_set(
        transaction_set_id,
        body,
        control_number=set_control_number,
        implementation_reference=IMPLEMENTATION_GUIDES.get(transaction_set_id, "005010X231A1"),
    )
    return build_interchange(
        sender_id=TEST_RECEIVER_ID,
        receiver_id=TEST_SENDER_ID,
        control_number=control_number,
        usage_indicator="P",
        transaction_segments=transaction,
        functional_identifier=FUNCTIONAL_IDENTIFIERS.get(transaction_set_id, "FA"),
        version=IMPLEMENTATION_GUIDES.get(transaction_set_id, "005010X231A1"),
        now=now or FIXED_NOW,
    )


def soap_response(payload: str) -> str:
    """A CORE real-time response envelope with the payload in CDATA."""
    return (
        '<soapenv:Envelope xmlns:soapenv="http://www.w3.org/2003/05/soap-envelope">'
        "<soapenv:Body>"
        '<ns1:COREEnvelopeRealTimeResponse xmlns:ns1="http://www.caqh.org/SOAP/WSDL/CORERule2.2.0.xsd">'
        "<PayloadType>X12_271_Response_005010X279A1</PayloadType>"
        "<ProcessingMode>RealTime</ProcessingMode>"
        "<PayloadID>f81d4fae-7dec-11d0-a765-00a0c91e6bf6</PayloadID>"
        "<TimeStamp>2025-01-15T17:30:00Z</TimeStamp>"
        "<SenderID>OFFALLY</SenderID>"
        "<ReceiverID>SENDER01</ReceiverID>"
        "<CORERuleVersion>2.2.0</CORERuleVersion>"
        f"<Payload><![CDATA[{payload}]]></Payload>"
        "<ErrorCode>Success</ErrorCode>"
        "<ErrorMessage></ErrorMessage>"
        "</ns1:COREEnvelopeRealTimeResponse>"
        "</soapenv:Body>"
        "</soapenv:Envelope>"
    )


@pytest.fixture
def x12_response():
    return build_response


@pytest.fixture
def soap_envelope():
    return soap_response
