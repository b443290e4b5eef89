"""Pydantic request/response contracts for the HTTP API."""
