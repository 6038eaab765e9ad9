# Overview: The fixed set of user roles.


class Role:
    """Role names as stored on User.role and carried in the session token."""
    ADMIN = "ADMIN"
    REP = "REP"
    VIEWER = "VIEWER"


ALL_ROLES = (Role.ADMIN, Role.REP, Role.VIEWER)


def is_valid_role(role) -> bool:
    return role in ALL_ROLES
