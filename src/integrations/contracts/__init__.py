"""
Contracts (data models).

This folder defines the request/response shapes for external integrations:
- Gateway order, checkout receipt and verification formats (payments.py)
- Account-creation outcomes (accounts.py)
- The abstract client interfaces (interfaces.py)

Both mock and real HTTP clients should use these contracts, so the
orchestrator relies on stable models instead of ad-hoc dicts.
"""
