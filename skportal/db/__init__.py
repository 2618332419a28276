"""Database layer for SK Portal."""
