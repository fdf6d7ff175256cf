"""
API test package for the todo service.

Tests use the Flask test client and cover:
- Registration, login and token checks
- Todo CRUD operations
- Input validation and error envelopes
"""
