"""ragdesk -- conversational retrieval-augmented help desk."""

__version__ = "0.1.0"
