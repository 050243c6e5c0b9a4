"""CLI package.

Contains the Click application. It imports only from the public API of
the parent package and its documented subpackages.
"""
from __future__ import annotations
