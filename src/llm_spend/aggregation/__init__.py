"""Read-only aggregate views over loaded usage events."""
