"""Settings and feature-flag resolution."""
