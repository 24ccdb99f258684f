"""
Database Models for the Link Service

This module defines the SQLModel schema for the single ``links`` table:
the mapping between a short code and its destination URL together with
the usage counter and last-access timestamp.

Design Decisions:
- The code itself is the primary key (uniqueness is enforced by the database,
  which is what makes insert-if-absent atomic)
- clicks and last_clicked are only written by the resolver's transaction
- Index on created_at for the newest-first listing
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text
from sqlmodel import Column, Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Link(SQLModel, table=True):
    """
    Short code to URL mapping.

    Fields:
    - code: 6-8 alphanumeric characters, immutable primary key
    - url: absolute http(s) destination, immutable
    - clicks: number of successful resolutions, never decreases
    - last_clicked: time of the latest resolution, NULL until the first one
    - created_at: insertion time, immutable
    """
    __tablename__ = "links"
    __table_args__ = (
        CheckConstraint("clicks >= 0", name="ck_links_clicks_non_negative"),
    )

    code: str = Field(
        sa_column=Column(String(8), primary_key=True),
        max_length=8
    )
    url: str = Field(sa_column=Column(Text, nullable=False))
    clicks: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0, server_default="0")
    )
    last_clicked: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
