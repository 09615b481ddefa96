"""Runner contracts and failure taxonomy.

Key principle:
- Pydantic validates config correctness
- Contracts validate runner and module correctness
- Modules handle science edge cases
"""

from masclab.contracts.failure import (
    FailureScope,
    MascLabError,
    ContractViolation,
    MissingTableError,
    CorruptFilenameError,
    ModuleExecutionError,
    OutputArityError,
    CommitError,
    UnknownModuleError,
    ModuleDependencyError,
    SlotConflictError,
)
from masclab.contracts.base import require
from masclab.contracts.modules import assert_output_arity

__all__ = [
    "FailureScope",
    "MascLabError",
    "ContractViolation",
    "MissingTableError",
    "CorruptFilenameError",
    "ModuleExecutionError",
    "OutputArityError",
    "CommitError",
    "UnknownModuleError",
    "ModuleDependencyError",
    "SlotConflictError",
    "require",
    "assert_output_arity",
]
