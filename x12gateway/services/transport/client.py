"""HTTP collaborator that posts CORE SOAP envelopes to the clearinghouse."""
from typing import Optional

import httpx

from x12gateway.config.settings import ClearinghouseSettings, get_settings
from x12gateway.services.transport.soap import SOAP_ACTION, SOAP_CONTENT_TYPE
from x12gateway.utils.errors import TransportFault
from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)


class SoapTransport:
    """
    Blocking SOAP transport over httpx.

    One POST per send(); no retry. Non-2xx responses and connection errors
    surface as TransportFault so callers can decide whether to try again.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
        settings: Optional[ClearinghouseSettings] = None,
    ):
        settings = settings or get_settings()
        self.endpoint = endpoint or settings.endpoint
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._client = client
        self._owns_client = client is None
        self.connected = client is not None

    def connect(self) -> bool:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
            self._owns_client = True
        self.connected = True
        return True

    def disconnect(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None
        self.connected = False

    def test_connection(self) -> bool:
        """True when the endpoint answers at all; any HTTP status counts."""
        if not self.connected:
            self.connect()
        try:
            self._client.get(self.endpoint)
        except httpx.HTTPError as e:
            logger.warning("Clearinghouse connection test failed", endpoint=self.endpoint, error=str(e))
            return False
        return True

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    def send(self, envelope: str) -> str:
        """POST one envelope and return the response body."""
        if not self.connected:
            self.connect()
        headers = {"Content-Type": SOAP_CONTENT_TYPE, "Action": SOAP_ACTION}
        try:
            response = self._client.post(self.endpoint, content=envelope.encode("utf-8"), headers=headers)
        except httpx.TransportError as e:
            logger.error("Clearinghouse request failed", endpoint=self.endpoint, error=str(e))
            raise TransportFault(fault_code=type(e).__name__, fault_message=str(e)) from e

        if not response.is_success:
            logger.error(
                "Clearinghouse returned an error status",
                endpoint=self.endpoint,
                status_code=response.status_code,
            )
            raise TransportFault(
                fault_code=f"HTTP {response.status_code}",
                fault_message=response.reason_phrase or "",
                raw=response.text,
            )

        logger.info("Clearinghouse response received", status_code=response.status_code, length=len(response.text))
        return response.text
