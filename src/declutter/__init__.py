"""Declutter Portal: backend for a home-services business.

Customers request quotes, staff turn them into scheduled jobs, and
managers administer employees. This package is the HTTP API plus the
session, role and status rules every endpoint relies on.
"""

__version__ = "0.1.0"
