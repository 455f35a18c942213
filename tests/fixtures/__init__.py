"""Test fixtures: sample entities and schema DDL."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Literal

from kitql import Entity, PrimaryKey

_FIXTURES_DIR = Path(__file__).parent

ARTICLE_KEY = PrimaryKey.single("id")
ARTICLE_TAG_KEY = PrimaryKey.composite("article_id", "share_seq")


class Article(Entity):
    id: int | None = None
    tenant_id: int | None = None
    title: str | None = None
    content: str | None = None
    views: int = 0
    deleted: bool = False
    created_at: datetime | None = None


class ArticleTag(Entity):
    article_id: int
    share_seq: int
    tag: str | None = None
    created_at: datetime | None = None


def load_ddl(target: Literal["sqlite", "postgres"] = "sqlite") -> str:
    """Return the sample DDL SQL string for the given backend.

    Args:
        target: ``'sqlite'`` (default) or ``'postgres'``.

    Returns:
        DDL string ready to execute against the target backend.
    """
    filename = f"ddl_{target}.sql"
    return (_FIXTURES_DIR / filename).read_text()
