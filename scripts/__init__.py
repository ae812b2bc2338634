"""Command-line entry points: billing runs and database seeding."""
