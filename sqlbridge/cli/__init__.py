"""Command line interface for SQLBridge."""
