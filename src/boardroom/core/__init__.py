"""Core domain and interfaces (no I/O)."""
