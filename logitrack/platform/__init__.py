"""Cross-cutting platform concerns: logging, errors, metrics, middleware."""
