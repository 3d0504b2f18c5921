"""Expose the application factory at package level.

Provide convenient access to :func:`chirpy.factory.create_app` so callers can
``from chirpy import create_app`` (or ``flask --app chirpy run``).
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
