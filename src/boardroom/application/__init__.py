"""Application layer: settings, logging and dependency wiring."""
