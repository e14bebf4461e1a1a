"""
Ingestion — document loading, chunking, and embedding into the vector store.

This module turns raw documents (text, Markdown, PDF) into vector records
stored in the configured collection.
"""
