"""
Real HTTP integration clients.

- payments.py: public key, checkout script, order creation and verification
- accounts.py: student account creation

Both implement the interfaces in src/integrations/contracts/interfaces.py and
return contract types. The selection of mock vs real clients happens in
src/api/main.py only.
"""
