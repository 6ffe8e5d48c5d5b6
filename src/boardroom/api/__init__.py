"""HTTP and CLI surfaces."""
