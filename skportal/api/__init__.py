"""HTTP API for SK Portal."""
