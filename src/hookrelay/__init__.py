"""
hookrelay - Form-to-webhook relay with self-registered relay pages

This package accepts form submissions over HTTP and forwards them to
Discord-style webhooks. Visitors can register a named page ("directory")
whose submissions are also delivered to their own webhook.

Main modules:
- core: configuration and error taxonomy
- directory: directory registry and path resolver
- throttle: per-client submission cooldown
- relay: payload validation, message formatting and webhook delivery
- ui: FastAPI application, JSON API and HTML pages
- cli: relayctl operational CLI
"""

__version__ = "0.3.0"
__author__ = "hookrelay maintainers"

__all__ = ["__version__", "__author__"]
