"""Greece Golden Visa cost calculator."""
