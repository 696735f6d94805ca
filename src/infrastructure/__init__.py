"""Infrastructure layer for patstore."""
