"""
Token authentication for the clinic API.

The front-end stores the legacy DRF token issued at login and sends it
as ``Authorization: Token <key>``.  Keeping the class in its own module
gives settings a stable import path that does not pull in any views, so
DRF can load authentication classes without circular imports.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication using the ``Token`` keyword."""

    keyword = 'Token'
