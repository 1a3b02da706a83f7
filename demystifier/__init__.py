"""Legal Demystifier: document analysis lifecycle and calendar reminder export."""

__version__ = "0.1.0"
