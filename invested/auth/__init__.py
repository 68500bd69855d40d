"""Identity module.

Validates bearer access tokens and exposes the caller as a
`UserIdentity`, plus the membership and admin gates.
"""
