"""
Development enrollment service for the FaceNomad wizard

This package provides a FastAPI stand-in for the remote biometric
enrollment service so the desktop wizard can be exercised end to end:
- POST /api/biometrics/enroll accepting a multipart face photo
- GET /health used by the client's backend auto-detection

It performs no face matching and keeps nothing on disk.
"""
