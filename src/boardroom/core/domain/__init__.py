"""Domain logic: planning pipeline, thought stream, permissions and dispatch."""
