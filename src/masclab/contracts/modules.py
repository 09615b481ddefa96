"""Module output contract.

Every module output must land in exactly one reserved slot.
"""

from masclab.contracts.failure import OutputArityError


def assert_output_arity(module_name: str, flake_ordinal: int, outputs, slots) -> None:
    """Enforce len(outputs) == len(slots) for one module invocation.

    Raises
    ------
    OutputArityError
        If the counts differ. The runner aborts only this module for the
        current DayFile.
    """
    if len(outputs) != len(slots):
        raise OutputArityError(module_name, flake_ordinal, len(slots), len(outputs))
