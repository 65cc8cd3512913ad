"""Runner module - upload orchestration."""

from .executor import ExecutionConfig, ExecutionResult, UploadExecutor, read_program

__all__ = [
    "ExecutionConfig",
    "ExecutionResult",
    "UploadExecutor",
    "read_program",
]
