"""
admintab core defaults.

Defines pagination bounds, primary-key defaults and the join alias convention consumed
by the query layer and the UI. This module is zero-IO and uses only the Python
standard library.

Notes:
    - Joined columns are projected as ``{table}{JOIN_ALIAS_SEPARATOR}{field}``
      (e.g., ``authors_joined_first_name``).
    - AdminSettings (admintab.io.config) may override the default page size within
      [1, MAX_PAGE_SIZE].
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "PAGE_SIZE_OPTIONS",
    "DEFAULT_PRIMARY_KEY",
    "JOIN_ALIAS_SEPARATOR",
]

# Rows per list page when neither the request nor the settings specify one.
DEFAULT_PAGE_SIZE: int = 10

# Upper bound accepted by PageRequest.page_size.
MAX_PAGE_SIZE: int = 500

# Page sizes offered by the list view selector.
PAGE_SIZE_OPTIONS: tuple[int, ...] = (10, 20, 30, 50)

DEFAULT_PRIMARY_KEY: str = "id"

JOIN_ALIAS_SEPARATOR: str = "_joined_"
