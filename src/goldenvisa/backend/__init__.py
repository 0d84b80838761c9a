"""Backend services for the Golden Visa cost calculator."""
