"""Fee profile configuration loading and validation."""
