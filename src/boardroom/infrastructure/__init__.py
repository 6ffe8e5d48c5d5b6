"""Infrastructure adapters implementing the core interfaces."""
