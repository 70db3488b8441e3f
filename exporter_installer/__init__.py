"""Prometheus exporter installer (systemd, step-driven).

Core design goals:
- One immutable descriptor per exporter
- Ordered, idempotent steps
- Fail fast on fatal errors, warn on best-effort ones
- Centralized logging
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
