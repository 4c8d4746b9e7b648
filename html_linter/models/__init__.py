"""
Data Models
===========

Pydantic models for diagnostics, lint results, configuration and API payloads.
"""
