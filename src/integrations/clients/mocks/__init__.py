"""
Mock integration clients.

These clients return fake (but realistic) responses without calling the payment gateway.
They are used when:
- Gateway credentials are not configured (local development)
- We want to test checkout end-to-end without external dependencies

Important:
- Mock clients must follow the SAME TransactionClient interface as real HTTP clients.
- Mock clients should build payloads with src/integrations/contracts/transactions.py

Switching to real:
When store credentials or a relay URL are provided, build_transaction_client()
(src/api/endpoints/payments.py) picks
clients/real_http/* implementations instead.
"""
