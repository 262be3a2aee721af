"""Core data model, identifiers and errors."""
