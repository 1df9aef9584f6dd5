"""Conversational RAG pipeline: condense, retrieve, answer, stream."""
