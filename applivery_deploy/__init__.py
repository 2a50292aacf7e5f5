"""Applivery deploy step: publish a mobile build to a per-branch Applivery publication."""

__version__ = "1.0.0"
