"""
Backend package for the blog API.

This package provides a FastAPI application serving site configuration,
the friend link directory, the favicon and object uploads, with
database, cache and storage abstractions that have in-memory doubles
for tests and local runs.
"""
