"""
Mock integration clients.

These clients return fake (but realistic) responses without calling any external API.
They are used when:
- The payments or auth backends are not reachable
- We want to run the wizard end-to-end without external dependencies

Important:
- Mock clients must follow the SAME interface as real HTTP clients.
- Mock clients should return data shaped according to src/integrations/contracts/*

Switching to real:
Set INTEGRATIONS_MODE=real (or configure PAYMENTS_API_URL / AUTH_API_URL) and
src/api/main.py wires clients/real_http/* instead.
"""
