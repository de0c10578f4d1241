"""In-memory event store and optional SQLite sink."""
