"""Protocols for the external collaborators of the core."""
