"""Value objects and pure helper functions for the domain layer."""
