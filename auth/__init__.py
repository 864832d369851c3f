"""
auth — User authentication module.

Provides:
  • Password hashing (bcrypt, pinned cost factor)
  • Signed, time-bound session tokens (HMAC-SHA256)
  • Register / Login / Me API routes
  • ``get_current_user_id`` FastAPI dependency
"""
