"""Command implementations for the llm-spend CLI."""
