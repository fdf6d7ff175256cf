"""
Test suite for the todo application.

This package contains:
- unit/: models, stores, services, security, config, HTTP client and view model
- integration/: REST API tests through the Flask test client
- security/: tenant isolation, mass assignment and token tampering
- smoke/: health check and the register/login/create critical path
"""
