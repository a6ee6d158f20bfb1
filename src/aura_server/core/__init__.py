"""Shared error types, exception handlers and text helpers."""
