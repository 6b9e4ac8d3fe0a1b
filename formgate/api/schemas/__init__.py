"""Pydantic models for request bodies, records and response envelopes."""
