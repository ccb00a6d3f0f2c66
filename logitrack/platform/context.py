"""
Name: Request Context (ContextVars)

Responsibilities:
  - Store request-scoped data (request_id, method, path, endpoint)
  - Enable structured logging with request correlation

Collaborators:
  - middleware.py: sets context at request start, clears at the end
  - logger.py: reads context for log enrichment

Constraints:
  - Only primitive types (str)
  - Default empty string (never None) for JSON serialization
"""

from contextvars import ContextVar

# R: Request identifier (UUID) - set by middleware
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# R: HTTP method - set by middleware
http_method_var: ContextVar[str] = ContextVar("http_method", default="")

# R: Request path - set by middleware
http_path_var: ContextVar[str] = ContextVar("http_path", default="")

# R: Authenticated subject (user id or api key id) - set by the access gate
subject_var: ContextVar[str] = ContextVar("subject", default="")


def get_context_dict() -> dict:
    """R: Current context as dict, non-empty values only."""
    ctx = {}

    if val := request_id_var.get():
        ctx["request_id"] = val
    if val := http_method_var.get():
        ctx["method"] = val
    if val := http_path_var.get():
        ctx["path"] = val
    if val := subject_var.get():
        ctx["subject"] = val

    return ctx


def clear_context() -> None:
    """R: Reset all context vars (called at request end)."""
    request_id_var.set("")
    http_method_var.set("")
    http_path_var.set("")
    subject_var.set("")
