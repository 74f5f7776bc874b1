"""Population-based search over bounded parameter spaces."""
