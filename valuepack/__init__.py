"""Implementation packages for ValueSet."""
