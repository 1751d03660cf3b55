"""
auth — User authentication module.

Provides:
  • Password hashing (scrypt with per-password salt)
  • Signed identity tokens (HS256, JWT layout)
  • Credential stores (SQLite via SQLAlchemy, in-memory)
  • Find-or-create reconciliation for federated logins
  • Signup / Login / Google API routes
  • ``get_current_user`` FastAPI dependency
"""
