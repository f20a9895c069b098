"""Domain layer: exceptions and the signal engine."""
