"""Exceptions raised by structural operations and decoders."""

from __future__ import annotations


class MalformedInput(ValueError):
    """Input bytes or response text are missing a required token."""


class CepoError(ValueError):
    """A CEPO change could not be applied to the configuration."""
