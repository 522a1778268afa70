"""API Schemas — Pydantic request/response models for the tutoring endpoints."""
