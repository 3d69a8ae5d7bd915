"""Retrieval-augmented chatbot over Azure AI Search."""

__version__ = "1.0.0"
