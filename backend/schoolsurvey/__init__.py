"""Application package for the school survey administration backend.

This package exposes the service, repository and model modules used by
the FastAPI application. Route handlers live in `main`; individual
modules contain the concrete implementations and documentation.
"""
