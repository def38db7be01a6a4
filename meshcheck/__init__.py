"""Helpers for end-to-end testing of service mesh deployments."""

__version__ = "0.1.0"

__all__ = [
    "images",
    "prometheus",
    "request",
    "retry",
    "sampling",
    "shell",
    "template",
    "version",
]