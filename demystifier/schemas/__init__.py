"""Domain schemas for document analysis."""

from demystifier.schemas.domain import (
    ContractAnalysisResult,
    ContractObligation,
    JargonTerm,
    KeyDate,
    PaymentTerm,
    SimplifiedAnalysis,
)

__all__ = [
    "ContractAnalysisResult",
    "ContractObligation",
    "JargonTerm",
    "KeyDate",
    "PaymentTerm",
    "SimplifiedAnalysis",
]
