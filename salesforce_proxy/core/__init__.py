"""Structured logging, exceptions and other cross-cutting concerns."""
