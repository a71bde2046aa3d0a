"""Pydantic schemas (API contract) and row-to-model mapping."""
