"""Statement interception: soft delete and global filters."""
from kitql.policy.interception import (
    GlobalFilterRule,
    InterceptionConfig,
    InterceptionSnapshot,
    SoftDeleteRule,
    default_interception,
    set_global_filter,
    set_soft_delete,
)

__all__ = [
    "GlobalFilterRule",
    "InterceptionConfig",
    "InterceptionSnapshot",
    "SoftDeleteRule",
    "default_interception",
    "set_global_filter",
    "set_soft_delete",
]
