"""
FastAPI REST Endpoints
======================

REST API endpoints for HTTP access to the lint engine.

Endpoints:
- POST /api/v1/lint: Lint HTML or Markdown source
- POST /api/v1/lint/report: Lint and return a formatted report
- GET /api/v1/rules: List available rules
- GET /health: Health check endpoint
"""
