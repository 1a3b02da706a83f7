"""Domain models for document analysis results."""

from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, field_validator

KeyDateType = Literal[
    "Renewal Window Opens",
    "Notice Period Deadline",
    "Contract Expiry",
    "Other",
]

KEY_DATE_TYPES: tuple[str, ...] = get_args(KeyDateType)


class JargonTerm(BaseModel):
    """A legal term with a plain-language definition."""

    model_config = ConfigDict(extra="forbid")

    term: str
    definition: str


class SimplifiedAnalysis(BaseModel):
    """Plain-language breakdown of a document for a layperson."""

    model_config = ConfigDict(extra="forbid")

    summary: str
    jargon: list[JargonTerm]
    potential_risks: list[str]
    actionable_next_steps: list[str]


class ContractObligation(BaseModel):
    """An explicit duty of one party, with its deadline and penalty."""

    model_config = ConfigDict(extra="forbid")

    who: str
    must_do: str
    by_when: str  # YYYY-MM-DD when specific, otherwise descriptive
    penalty: str
    source_span: str


class KeyDate(BaseModel):
    """A non-payment date of contractual significance."""

    model_config = ConfigDict(extra="forbid")

    event_type: KeyDateType
    date: str
    details: str
    source_span: str

    @field_validator("event_type", mode="before")
    @classmethod
    def _coerce_event_type(cls, value: Any) -> Any:
        if isinstance(value, str) and value not in KEY_DATE_TYPES:
            return "Other"
        return value


class PaymentTerm(BaseModel):
    """A payment-related term. Shown to the user, never exported to calendars."""

    model_config = ConfigDict(extra="forbid")

    amount: str
    due_date: str
    frequency: str
    recipient: str
    source_span: str


class ContractAnalysisResult(BaseModel):
    """Obligations, key dates and payment terms extracted from a contract."""

    model_config = ConfigDict(extra="forbid")

    obligations: list[ContractObligation]
    key_dates: list[KeyDate]
    payment_terms: list[PaymentTerm]
