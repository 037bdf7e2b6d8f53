# src/genrepo/core/logging/filters.py
"""
Logging filters.

Correlation id filter and helpers for logging.

Every unit of work opened with `genrepo.db.session.session_scope()` gets a short
correlation id stored in a `contextvars.ContextVar`. `CorrelationIdFilter` copies it
onto each `LogRecord`, so all repository log lines emitted inside one transaction can
be grouped together, and formatters may reference `%(correlation_id)s` safely.

Usage
-----
- Declare the filter in the dictConfig "filters" section and attach it to handlers
  (builder.py does both).
- Call `set_correlation_id(cid)` at the start of a unit of work and
  `reset_correlation_id(token)` at the end (session_scope does both).
- Records logged outside a unit of work get the sentinel "-".
"""

import logging
from logging import LogRecord
import contextvars

_correlation_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)


def set_correlation_id(correlation_id: str | None) -> contextvars.Token:
    """
    Set the correlation id in the current context and return the token to allow reset.
    """
    return _correlation_id_ctx.set(correlation_id)


def reset_correlation_id(token: contextvars.Token) -> None:
    _correlation_id_ctx.reset(token)


def get_correlation_id() -> str | None:
    return _correlation_id_ctx.get()


class CorrelationIdFilter(logging.Filter):
    """
    Guarantee every LogRecord has a `correlation_id` attribute.

    Precedence:
      * an explicit `extra={"correlation_id": ...}` on the logging call
      * the contextvar value set by session_scope()
      * the sentinel "-"
    Always returns True: the filter annotates, it never drops records.
    """

    def filter(self, record: LogRecord) -> bool:
        record.correlation_id = (
            getattr(record, "correlation_id", None) or get_correlation_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    """Mask record attributes (usually `extra` keys) whose name looks sensitive."""

    SENSITIVE = {"password", "secret", "token", "access_token", "refresh_token", "ssn", "authorization"}
    MASK = "***REDACTED***"

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = self.MASK
        return True
