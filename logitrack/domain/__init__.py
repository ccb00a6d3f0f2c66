"""Domain entities and repository contracts."""
