"""
Ingestion — text extraction, chunking, and embedding into the vector store.

This module is responsible for the ETL-like pipeline that converts uploaded
documents (PDF, plain text) into embedded chunks stored in a vector
database.
"""
