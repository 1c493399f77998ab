"""Admin console for the codex-mcp directory-indexing service."""
