"""
Test Utilities
==============

Assertion helpers, data generators and rule runners shared by the tests.
"""
