"""Application services for SK Portal."""
