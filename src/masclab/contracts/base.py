"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for internal
invariants of the runner.
"""

from masclab.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a runner contract.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.

    message : str
        Error message explaining the contract violation (for debugging).

    Raises
    ------
    ContractViolation
        If condition is False. This indicates a bug in runner logic.

    Examples
    --------
    >>> require(slot >= FIRST_SLOT, f"slot {slot} overlaps base columns")
    """
    if not condition:
        raise ContractViolation(message)
