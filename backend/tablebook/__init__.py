"""Table reservation scheduling service for a single venue."""
