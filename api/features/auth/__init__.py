"""Auth feature package: resolves the caller's session issued by the auth service.

Session issuance and credential storage live in the auth service; this package
only maps an incoming request to ``AuthContext`` or rejects it.
"""
