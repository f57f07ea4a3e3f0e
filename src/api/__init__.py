"""HTTP API for ContractLens."""
