# Overview: Utility functions for policy table lookups and validation.

from .definitions import OPERATION_DEFINITIONS


def get_all_operation_codes():
    """Get list of all operation codes."""
    return [op[0] for op in OPERATION_DEFINITIONS]


def get_allowed_roles(code) -> tuple:
    """
    Roles allowed to perform an operation.

    Unknown codes map to an empty tuple so a typo fails closed.
    """
    for op in OPERATION_DEFINITIONS:
        if op[0] == code:
            return op[4]
    return ()


def get_role_operations(role):
    """Operation codes a role may perform."""
    return [op[0] for op in OPERATION_DEFINITIONS if role in op[4]]


def validate_operation_code(code):
    """Check if an operation code is valid."""
    return code in get_all_operation_codes()
