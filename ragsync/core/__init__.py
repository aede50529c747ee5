"""
Core domain logic: document processing, reconciliation and retrieval.
"""
