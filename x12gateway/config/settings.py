"""Clearinghouse connection and envelope settings."""
from typing import Optional

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
LOG_FORMATS = frozenset({"json", "console"})


class ClearinghouseSettings(BaseSettings):
    """Settings for the real-time clearinghouse connection, read from the environment."""

    endpoint: str = Field(
        default="https://wsd.officeally.com/TransactionService/rtx.svc",
        alias="CLEARINGHOUSE_ENDPOINT",
    )
    request_timeout: float = Field(default=30.0, alias="CLEARINGHOUSE_TIMEOUT")
    username: str = Field(default="", alias="CLEARINGHOUSE_USERNAME")
    password: SecretStr = Field(default=SecretStr(""), alias="CLEARINGHOUSE_PASSWORD")

    sender_id: str = Field(default="", alias="X12_SENDER_ID")
    sender_qualifier: str = Field(default="ZZ", alias="X12_SENDER_QUALIFIER")
    receiver_id: str = Field(default="OFFALLY", alias="X12_RECEIVER_ID")
    receiver_qualifier: str = Field(default="01", alias="X12_RECEIVER_QUALIFIER")
    claims_receiver_id: str = Field(default="330897513", alias="X12_CLAIMS_RECEIVER_ID")
    claims_receiver_name: str = Field(default="OFFICE ALLY", alias="X12_CLAIMS_RECEIVER_NAME")
    usage_indicator: str = Field(default="P", alias="X12_USAGE_INDICATOR")

    submitter_name: str = Field(default="", alias="X12_SUBMITTER_NAME")
    submitter_contact_name: str = Field(default="BILLING CONTACT", alias="X12_SUBMITTER_CONTACT")
    submitter_phone: str = Field(default="", alias="X12_SUBMITTER_PHONE")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_dir: str = Field(default="logs", alias="LOG_DIR")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"
        populate_by_name = True

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(LOG_LEVELS)}")
        return level

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, value: str) -> str:
        log_format = value.lower()
        if log_format not in LOG_FORMATS:
            raise ValueError(f"LOG_FORMAT must be one of {sorted(LOG_FORMATS)}")
        return log_format

    def interchange_parties(self, for_claims: bool = False) -> "InterchangeParties":
        """Envelope identities for a real-time inquiry or a claim submission."""
        if for_claims:
            return InterchangeParties(
                sender_id=self.sender_id,
                receiver_id=self.claims_receiver_id,
                sender_qualifier=self.sender_qualifier,
                receiver_qualifier=self.receiver_qualifier,
                usage_indicator=self.usage_indicator,
            )
        return InterchangeParties(
            sender_id=self.sender_id,
            receiver_id=self.receiver_id,
            sender_qualifier=self.sender_qualifier,
            receiver_qualifier=self.receiver_qualifier,
            usage_indicator=self.usage_indicator,
        )


class InterchangeParties(BaseModel):
    """Who sends and who receives an interchange."""

    model_config = {"frozen": True}

    sender_id: str
    receiver_id: str
    sender_qualifier: str = "ZZ"
    receiver_qualifier: str = "01"
    usage_indicator: str = "P"


_settings: Optional[ClearinghouseSettings] = None


def get_settings() -> ClearinghouseSettings:
    """Get the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = ClearinghouseSettings()
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
