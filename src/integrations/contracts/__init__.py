"""
Contracts (data models).

This folder defines the request/response shapes for the payment gateway:
- TransactionRequest / TransactionStatus
- the transaction creation payload the gateway expects

Both mock and real HTTP clients should use these contracts.
"""
