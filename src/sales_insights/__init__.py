"""Read-only sales CRM analytics over a cleaned in-memory snapshot."""

__version__ = "0.1.0"
