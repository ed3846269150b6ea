"""
Custom exceptions for the admintab.io module.

Purpose
- Provide IO-layer specific error types that map cleanly to responsibilities in admintab.io.
- Keep admintab.core as the source of truth for descriptor/registry errors (see
  admintab.core.errors).

Source of truth and boundaries
- admintab.core.errors.MalformedDescriptor and GrammarError are raised by core builders.
- admintab.io raises Io* errors for settings/database concerns:
  - IoConfigError: invalid or unsupported configuration.
  - IoQueryError: a relational request could not be turned into SQL or failed to run.

Notes
- These exceptions do not perform any IO and are stdlib-only.
- admintab.io.datasource degrades IoQueryError raised while listing rows to an empty
  page; writes (save_form, delete_rows) let it propagate.
"""

from __future__ import annotations

__all__ = ["IoError", "IoConfigError", "IoQueryError"]


class IoError(Exception):
    """
    Base class for IO-related errors in admintab.io.

    Notes:
        Use this as a catch-all for IO-layer failures, distinct from admintab.core errors.
    """


class IoConfigError(IoError):
    """
    Raised when settings are invalid or unsupported.

    Examples:
        - page_size < 1
        - port outside 1..65535
        - unknown log level
    """


class IoQueryError(IoError):
    """
    Raised when a relational query cannot be built or executed.

    Notes:
        Covers unsafe identifiers, unknown tables and sqlite3 errors wrapped at the
        query boundary.
    """
