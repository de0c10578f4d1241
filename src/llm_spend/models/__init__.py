"""Usage event and pricing models."""
