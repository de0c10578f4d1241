"""Log discovery and JSONL extraction."""
