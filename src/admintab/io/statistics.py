"""
Dashboard statistics read from the ``statistics`` table.

Notes
- One logical field per column: ``id`` identifies the snapshot and ``cpu`` is its own
  column.
- ``first_statistics`` mirrors the dashboard's "first row" lookup and returns an
  all-zero snapshot when the table is empty.
"""

from __future__ import annotations

import sqlite3
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import IoQueryError

__all__ = ["Statistics", "first_statistics"]


class Statistics(BaseModel):
    """
    One dashboard snapshot.

    Attributes:
        id (int): Snapshot id (0 for the empty default).
        cpu (int): CPU traffic figure.
        likes (int): Likes count.
        sales (int): Sales count.
        new_members (int): New member count.
        created_at (str | None): Creation timestamp text.
        updated_at (str | None): Update timestamp text.
    """

    model_config = ConfigDict(extra="ignore")

    id: int = 0
    cpu: int = Field(default=0, ge=0)
    likes: int = Field(default=0, ge=0)
    sales: int = Field(default=0, ge=0)
    new_members: int = Field(default=0, ge=0)
    created_at: str | None = None
    updated_at: str | None = None

    @field_validator("cpu", "likes", "sales", "new_members", mode="before")
    @classmethod
    def _none_is_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    def kpis(self) -> dict[str, int]:
        """Label -> value pairs shown as dashboard metric tiles."""
        return {
            "CPU traffic": self.cpu,
            "Likes": self.likes,
            "Sales": self.sales,
            "New members": self.new_members,
        }


def first_statistics(conn: sqlite3.Connection) -> Statistics:
    """
    Return the lowest-id statistics row, or an all-zero snapshot.

    Raises:
        IoQueryError: If the query fails (e.g., the table does not exist).
    """
    try:
        row = conn.execute('SELECT * FROM "statistics" ORDER BY "id" ASC LIMIT 1').fetchone()
    except sqlite3.Error as exc:
        raise IoQueryError(f"failed to read statistics: {exc}") from exc
    if row is None:
        return Statistics()
    return Statistics.model_validate(dict(row))
