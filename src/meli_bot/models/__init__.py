"""Pydantic models for credentials, orders and notifications."""
