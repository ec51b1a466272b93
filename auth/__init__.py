"""
auth — User account module.

Provides:
  • Credential store over the ``users`` table
  • Password hashing (bcrypt, configurable cost)
  • Signed session tokens (JWT, HS256 by default)
  • ``AccountService`` orchestrating register / login / delete
  • Register / Login / Delete API routes
"""
