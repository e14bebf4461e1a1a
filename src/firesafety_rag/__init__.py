"""Retrieval-augmented question answering for fire safety engineering documents."""
