"""Structural accessors over payload types."""
from __future__ import annotations

from cmdtarget.shape.members import Member, MemberKind, describe, fields_of, methods_of

__all__ = ["Member", "MemberKind", "describe", "fields_of", "methods_of"]
