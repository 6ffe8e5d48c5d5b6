"""Boardroom - agent task planning and permission-gated execution engine."""

__version__ = "0.1.0"
