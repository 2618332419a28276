"""API routers for SK Portal."""
