"""Void Linux post-install configurator (staged, fail-fast).

Core design goals:
- Choices resolved once, up front, into an immutable configuration
- Fixed step order with per-step inclusion predicates
- Best-effort package probing with ordered fallbacks
- Idempotent runit service enablement
- Centralized logging
"""

__version__ = "2026.2.26"

__all__ = ["__version__"]
