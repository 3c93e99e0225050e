"""
Loan Applications Module

Handles the public loan application form:
1. Optional loan document upload (stored transiently)
2. Field validation with every violation reported at once
3. Staff notification and applicant auto-reply, sent after the response

API Endpoints:
- POST /api/submit-loan-application - Submit an application

Security Features:
- Stored filenames are generated, never taken from the client
- Submitted values are HTML-escaped in email templates
- Rate limiting per client IP
"""

from .router import router

__all__ = ["router"]
