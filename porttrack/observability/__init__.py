"""Observability helpers.

Request IDs + structlog contextvars, Prometheus metrics on a dedicated registry,
and the telemetry sink that mirrors structured events to Fluentd.
"""
