"""
Real HTTP integration clients.

These clients communicate with the payment gateway via httpx:
- transactions.py: Maksekeskus transactions API with store credentials
- relay.py: webhook relay that forwards transactions without credentials

Important:
- Must implement the same TransactionClient interface as the mock client
- Must raise the errors in src/integrations/errors.py, never raw httpx exceptions

Switching:
The selection of mock vs real clients happens only in build_transaction_client()
(src/api/endpoints/payments.py).
"""
