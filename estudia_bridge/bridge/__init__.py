from .adapter import ToolCallAdapter
from .envelope import OperationResult
from .operations import OPERATIONS, FieldKind, FieldSpec, OperationDescriptor, get_operation

__all__ = [
    "OPERATIONS",
    "FieldKind",
    "FieldSpec",
    "OperationDescriptor",
    "OperationResult",
    "ToolCallAdapter",
    "get_operation",
]
