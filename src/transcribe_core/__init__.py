"""Shared service plumbing: logging, errors, config, request context, HTTP."""
