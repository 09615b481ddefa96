"""Centralized failure taxonomy for the module runner.

Each error carries the scope it poisons:

- MissingTableError: one DayFile (skip it)
- CorruptFilenameError: the whole run (halt, persist nothing for the file)
- ModuleExecutionError / OutputArityError: one module on one DayFile
- CommitError: one DayFile commit (never write without a backup)
- UnknownModuleError / ModuleDependencyError / SlotConflictError: the run,
  before any DayFile is touched
"""

from enum import Enum


class FailureScope(str, Enum):
    """How far a failure reaches."""
    FILE = "file"
    MODULE = "module"
    RUN = "run"


class MascLabError(RuntimeError):
    """Base class for module runner failures."""
    scope = FailureScope.RUN


class ContractViolation(MascLabError):
    """Raised when an internal invariant is violated.

    This indicates a bug in runner logic, not bad data or a misbehaving module.
    """
    pass


class MissingTableError(MascLabError):
    """Cache file does not hold the expected record table."""
    scope = FailureScope.FILE

    def __init__(self, path, table: str):
        self.path = path
        self.table = table
        super().__init__(f"{path} has no '{table}' table")


class CorruptFilenameError(MascLabError):
    """A record's source path does not match the image filename pattern exactly once."""
    scope = FailureScope.RUN

    def __init__(self, source_path: str, cache_file=None, record_index=None, num_matches: int = 0):
        self.source_path = source_path
        self.cache_file = cache_file
        self.record_index = record_index
        self.num_matches = num_matches
        super().__init__(
            f"Corrupt filename {source_path!r} ({num_matches} pattern matches) "
            f"in {cache_file} at record {record_index}"
        )


class ModuleExecutionError(MascLabError):
    """A module raised while resolving inputs or running on a flake."""
    scope = FailureScope.MODULE

    def __init__(self, module_name: str, flake_ordinal: int, cause: BaseException):
        self.module_name = module_name
        self.flake_ordinal = flake_ordinal
        self.cause = cause
        super().__init__(
            f"Module '{module_name}' failed on flake {flake_ordinal}: "
            f"{type(cause).__name__}: {cause}"
        )


class OutputArityError(MascLabError):
    """A module returned a different number of outputs than it has slots."""
    scope = FailureScope.MODULE

    def __init__(self, module_name: str, flake_ordinal: int, expected: int, actual: int):
        self.module_name = module_name
        self.flake_ordinal = flake_ordinal
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Module '{module_name}' returned {actual} output(s) for flake "
            f"{flake_ordinal}, expected {expected}"
        )


class CommitError(OSError):
    """Backup rename or write of a DayFile failed."""
    scope = FailureScope.FILE

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not commit {path}: {reason}")


class UnknownModuleError(MascLabError):
    """A selected module name is not registered."""

    def __init__(self, module_name: str, available=()):
        self.module_name = module_name
        super().__init__(
            f"Unknown module '{module_name}'. Available: {sorted(available)}"
        )


class ModuleDependencyError(MascLabError):
    """A selected module's dependency is missing or scheduled after it."""
    pass


class SlotConflictError(MascLabError):
    """Two modules claim the same attribute slot, or a slot overlaps the base columns."""
    pass
