"""
Routes package for the todo application.

This package contains the ``api`` blueprint: REST endpoints for
registration, login and todo CRUD.
"""
