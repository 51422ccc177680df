"""depscope CLI commands."""
