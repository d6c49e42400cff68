"""Authentication and authorization.

Customers, employees and managers log in with email/password and receive
an opaque bearer token stored in auth_tokens. Every protected request
resolves that token to a CurrentUser, and role checks run against it.
"""
