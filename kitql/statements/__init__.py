"""KitQL statement builders."""
from kitql.statements.base import JoinType, Statement
from kitql.statements.delete import Delete, Restore
from kitql.statements.insert import Insert
from kitql.statements.select import Select
from kitql.statements.subquery import Subquery
from kitql.statements.update import Update
from kitql.statements.upsert import Upsert

__all__ = [
    "JoinType",
    "Statement",
    "Delete",
    "Restore",
    "Insert",
    "Select",
    "Subquery",
    "Update",
    "Upsert",
]
