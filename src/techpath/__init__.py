"""TechPath learning platform backend."""
