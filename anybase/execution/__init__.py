"""
Execution

Batched transactional statement execution and named locks.
"""

from anybase.execution.executor import QueryExecutor, to_batches
from anybase.execution.locks import named_lock, lock_file_path

__all__ = ["QueryExecutor", "to_batches", "named_lock", "lock_file_path"]
