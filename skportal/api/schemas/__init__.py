"""Pydantic schemas for the SK Portal API."""
