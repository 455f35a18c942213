"""Shared pytest fixtures for KitQL unit and integration tests."""
from __future__ import annotations

import pytest

from kitql import InterceptionConfig


@pytest.fixture()
def interception() -> InterceptionConfig:
    """Fresh interception rules, isolated from the process-wide default."""
    return InterceptionConfig()


@pytest.fixture()
def soft_delete(interception: InterceptionConfig) -> InterceptionConfig:
    """Soft delete on ``deleted`` for every table except ``article_tag``."""
    interception.set_soft_delete("deleted", excluded_tables=["article_tag"])
    return interception
