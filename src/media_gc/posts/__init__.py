"""Post lifecycle entry points."""
