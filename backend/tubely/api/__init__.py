"""
Tubely API Package.

Endpoint implementations organized by version.

Package Structure:
    - v1/: Version 1 API endpoints
        - videos.py: Video and thumbnail upload, video lookup
"""
