"""
Serving — FastAPI application for ingestion and grounded chat.

Run locally with ``uvicorn company_knowledge.serving.app:app``.
"""
