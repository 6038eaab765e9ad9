# Overview: Operation policy table organized by category.
# Each operation is defined as: (code, name, description, category, allowed_roles)

from .categories import PermissionCategory
from .roles import Role


# -- USERS --

USER_OPERATIONS = [
    (
        "CREATE_USER",
        "Create User",
        "Create a user account and optionally bind it to a lorry",
        PermissionCategory.USERS,
        (Role.ADMIN,),
    ),
    (
        "DELETE_USER",
        "Delete User",
        "Delete a user account (never the caller's own)",
        PermissionCategory.USERS,
        (Role.ADMIN,),
    ),
]


# -- LOGISTICS --

LOGISTICS_OPERATIONS = [
    (
        "CREATE_LORRY",
        "Create Lorry",
        "Add a lorry to a territory",
        PermissionCategory.LOGISTICS,
        (Role.ADMIN,),
    ),
    (
        "UPDATE_LORRY",
        "Update Lorry",
        "Rename a lorry or move it to another territory",
        PermissionCategory.LOGISTICS,
        (Role.ADMIN,),
    ),
    (
        "DELETE_LORRY",
        "Delete Lorry",
        "Delete a lorry with no remaining routes",
        PermissionCategory.LOGISTICS,
        (Role.ADMIN,),
    ),
    (
        "CREATE_ROUTE",
        "Create Route",
        "Add a route to a lorry",
        PermissionCategory.LOGISTICS,
        (Role.ADMIN,),
    ),
    (
        "UPDATE_ROUTE",
        "Update Route",
        "Rename a route or reassign it to another lorry",
        PermissionCategory.LOGISTICS,
        (Role.ADMIN,),
    ),
    (
        "DELETE_ROUTE",
        "Delete Route",
        "Delete a route with no remaining shops",
        PermissionCategory.LOGISTICS,
        (Role.ADMIN,),
    ),
]


# -- SHOPS --

SHOP_OPERATIONS = [
    (
        "CREATE_SHOP",
        "Create Shop",
        "Record a new shop with location, payment terms and photo",
        PermissionCategory.SHOPS,
        (Role.ADMIN, Role.REP),
    ),
    (
        "UPDATE_SHOP",
        "Update Shop",
        "Edit a shop's details or replace its photo",
        PermissionCategory.SHOPS,
        (Role.ADMIN, Role.REP),
    ),
    (
        "DELETE_SHOP",
        "Delete Shop",
        "Remove a shop",
        PermissionCategory.SHOPS,
        (Role.ADMIN,),
    ),
]


# -- DASHBOARD --

DASHBOARD_OPERATIONS = [
    (
        "VIEW_DASHBOARD",
        "View Dashboard",
        "Browse lorries, routes and shops within the session scope",
        PermissionCategory.DASHBOARD,
        (Role.ADMIN, Role.REP, Role.VIEWER),
    ),
    (
        "VIEW_PROFILE",
        "View Profile",
        "View the caller's own account and session context",
        PermissionCategory.DASHBOARD,
        (Role.ADMIN, Role.REP, Role.VIEWER),
    ),
    (
        "VIEW_ADMIN_PAGES",
        "View Admin Pages",
        "Open the user and logistics management views",
        PermissionCategory.DASHBOARD,
        (Role.ADMIN,),
    ),
]


OPERATION_DEFINITIONS = (
    USER_OPERATIONS
    + LOGISTICS_OPERATIONS
    + SHOP_OPERATIONS
    + DASHBOARD_OPERATIONS
)
