# Overview: Permission category constants for grouping related operations.


class PermissionCategory:
    """Operation categories for organization and UI display."""
    USERS = "USERS"
    LOGISTICS = "LOGISTICS"
    SHOPS = "SHOPS"
    DASHBOARD = "DASHBOARD"
