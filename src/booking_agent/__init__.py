"""Flight booking assistant service."""
