"""API route handlers."""

from api.routes import evidence, health, logs, markets, reconsider, resolve

__all__ = ["evidence", "health", "logs", "markets", "reconsider", "resolve"]
