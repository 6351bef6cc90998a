"""
Shared Types

Result objects returned by the executor and the CRUD facade.
"""

from anybase.shared.types.results import CudResult, ReadResult, ScalarResult, Row

__all__ = ["CudResult", "ReadResult", "ScalarResult", "Row"]
