"""ragdesk: knowledge-base retrieval and knowledge-gap detection."""

__version__ = "0.1.0"
