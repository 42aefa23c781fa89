"""
Core infrastructure for the Tubely backend.

- auth: Bearer token extraction and JWT verification
- database: MongoDB async client with Motor driver and connection pooling
- exceptions: Upload error taxonomy mapped to HTTP statuses
- storage: S3-compatible storage client used to publish videos
"""
