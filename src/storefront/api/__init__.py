"""HTTP API layer - FastAPI application, routes and request models."""
