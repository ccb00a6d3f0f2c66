"""HTTP surface: routers and exception handlers."""
