"""Timeline data models - community-reported immigration processing timelines.

Key Models:
- TimelineRecord: one user-submitted or seeded case with milestone dates
- CompletionStatus: derived status used by the completion filter
- DataSource: seeded vs user-submitted rows
- ClaimResult: outcome of a successful claim

Dates are kept as the strings the record store returns. Seeded rows may carry
free text in date columns, so parsing happens where a date is actually needed
(sorting, display), never at load time.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Milestones in processing order
MILESTONE_DATE_FIELDS = (
    "ita_date",
    "aor_date",
    "bio_req_date",
    "medical_date",
    "eligibility_check",
    "eligibility_completion_date",
    "bg_check",
    "bg_completion_date",
    "final_decision_date",
    "ppr_p1_date",
    "p2_passport_sent_date",
    "ecopr_passport_received_date",
    "pr_card_sent_date",
    "pr_card_received_date",
)

CATEGORY_FIELDS = (
    "stream",
    "application_type",
    "complexity",
    "primary_visa_office",
    "secondary_visa_office",
    "country",
)

# Columns an owner may change through an update call
EDITABLE_FIELDS = MILESTONE_DATE_FIELDS + CATEGORY_FIELDS + ("notes", "ircc_last_update")

# Columns matched by the free-text search box
SEARCH_FIELDS = (
    "username",
    "stream",
    "primary_visa_office",
    "secondary_visa_office",
    "application_type",
)

# Timestamp columns that sort chronologically
TIMESTAMP_FIELDS = ("created_at", "updated_at", "last_updated_by_user", "ircc_last_update")


class DataSource(str, Enum):
    """Origin of a timeline row."""

    USER_SUBMISSION = "user_submission"
    SEED = "seed"


class CompletionStatus(str, Enum):
    """Completion stage derived from the passport/PR card received dates."""

    ACTIVE = "active"
    ECOPR = "ecopr"
    PR_CARD = "pr-card"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["CompletionStatus"]:
        """Return the matching status, or None for empty/unrecognized values."""
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class TimelineRecord(BaseModel):
    """One immigration case as stored in the `timelines` table."""

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    id: int = Field(..., description="Store-assigned identifier, immutable")
    email: Optional[str] = Field(None, description="Owner email once claimed or submitted")
    email_verified: bool = Field(False, description="True once an owner email is attached")
    verification_token: Optional[str] = None
    verification_token_expires: Optional[str] = None
    username: str = Field("", description="Public display name")

    # Key dates
    ita_date: Optional[str] = None
    aor_date: Optional[str] = None
    bio_req_date: Optional[str] = None
    medical_date: Optional[str] = None
    eligibility_check: Optional[str] = None
    eligibility_completion_date: Optional[str] = None
    bg_check: Optional[str] = None
    bg_completion_date: Optional[str] = None
    final_decision_date: Optional[str] = None
    ppr_p1_date: Optional[str] = None
    p2_passport_sent_date: Optional[str] = None
    ecopr_passport_received_date: Optional[str] = None
    pr_card_sent_date: Optional[str] = None
    pr_card_received_date: Optional[str] = None

    # Details
    stream: Optional[str] = None
    application_type: Optional[str] = None
    complexity: Optional[str] = None
    primary_visa_office: Optional[str] = None
    secondary_visa_office: Optional[str] = None
    country: Optional[str] = None

    # Content
    notes: Optional[str] = None
    ircc_last_update: Optional[str] = None

    # Metadata
    last_updated_by_user: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    data_source: Optional[str] = None

    @field_validator("email_verified", mode="before")
    @classmethod
    def null_as_unverified(cls, v):
        return False if v is None else v

    @model_validator(mode="after")
    def validate_verified_email(self):
        """A verified record must carry an email"""
        if self.email_verified and not self.email:
            raise ValueError("email_verified requires a non-empty email")
        return self

    @property
    def is_claimed(self) -> bool:
        return bool(self.email)

    @property
    def verified_email(self) -> Optional[str]:
        """Email that grants edit rights, None unless verified."""
        return self.email if self.email_verified and self.email else None

    @property
    def has_ecopr(self) -> bool:
        return bool(self.ecopr_passport_received_date)

    @property
    def has_pr_card(self) -> bool:
        return bool(self.pr_card_received_date)


class ClaimResult(BaseModel):
    """Outcome of a successful claim."""

    message: str
    timeline_id: int
    username: str
