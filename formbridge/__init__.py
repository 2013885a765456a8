"""
FormBridge - Application Package
=================================

What: Bridges a public submission form to a JSON "database" kept in a GitHub
      repository. Uploaded images become new files in the repository and every
      submission is appended to a JSON array file through the contents API.
Who:  Imported by uvicorn (``formbridge.main:app``), pytest and ``python -m formbridge``.

Layers:
    ┌─────────────────────────────────────┐
    │        Routes (HTTP layer)          │  ← form parsing, status codes
    ├─────────────────────────────────────┤
    │   SubmissionService (orchestration) │  ← validate, upload, append
    ├─────────────────────────────────────┤
    │   Variants & record builder         │  ← record shape per deployment
    ├─────────────────────────────────────┤
    │   ContentStore (GitHub contents)    │  ← read / conditional write
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
