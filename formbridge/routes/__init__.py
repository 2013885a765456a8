"""
FormBridge - API Routes Package
================================

Route Inventory:
    - submit.py:  POST /submit     (form submission, multipart)
                  OPTIONS /submit  (preflight without CORS headers)
    - health.py:  GET  /health     (service and content store status)

Routes stay thin: they turn the multipart form into plain fields plus an
optional ImageUpload and hand both to SubmissionService.
"""
