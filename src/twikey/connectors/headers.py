"""Headers e content types usados na API Twikey."""

AUTHORIZATION_HEADER = "Authorization"
API_ERROR_HEADER = "Apierror"
IDEMPOTENCY_HEADER = "Idempotency-Key"
RESUME_AFTER_HEADER = "X-RESUME-AFTER"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "application/xml"
