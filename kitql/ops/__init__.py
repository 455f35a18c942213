"""KitQL operation layer: façade, transactions and connection acquisition."""
from kitql.ops.database import Database
from kitql.ops.facade import TableOperations
from kitql.ops.transaction import Transaction, TransactionState

__all__ = ["Database", "TableOperations", "Transaction", "TransactionState"]
