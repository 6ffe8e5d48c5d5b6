"""Prompt templates used by the planning pipeline."""
