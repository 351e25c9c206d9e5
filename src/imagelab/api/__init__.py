"""Classroom Image Lab FastAPI REST API layer.

Modules
-------
main
    FastAPI application factory, routes, exception handlers, and the
    ``main()`` CLI entry point.
models
    Pydantic models for API request and response validation.
"""
