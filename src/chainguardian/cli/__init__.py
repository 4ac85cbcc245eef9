"""Command-line interface for ChainGuardian."""
