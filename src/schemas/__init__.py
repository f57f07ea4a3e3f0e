"""Pydantic schemas for ContractLens."""
