"""
auth — Account authentication module.

Provides:
  • Password hashing (bcrypt, salted, tunable work factor)
  • HMAC-signed bearer token issuance & verification
  • ``AuthGate`` request gate and ``RequestIdentity``
  • ``get_current_account_id`` FastAPI dependency
"""
