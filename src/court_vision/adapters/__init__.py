"""Provider adapters for external services.

This module contains abstract interfaces and implementations for:
- Video annotation (Google Video Intelligence, stub)
- Language models (OpenAI, stub)
- Blob storage (GCS, local filesystem)
- Video job persistence (SQL, in-memory)
"""
