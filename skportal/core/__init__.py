"""Core domain logic for SK Portal."""
