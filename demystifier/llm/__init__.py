"""LLM-backed analysis collaborators."""

from demystifier.llm.analyzer import AnalysisError, analyze_contract, analyze_general

__all__ = ["AnalysisError", "analyze_contract", "analyze_general"]
