"""
Role definitions and the access policy.

Every protected route declares the roles it admits; require_role asks
is_allowed() before the route body runs. Business services never check
roles themselves.
"""

ROLE_ADMIN = "ADMIN"
ROLE_SELLER = "SELLER"
ROLE_PRODUCTION = "PRODUCTION"

ALL_ROLES = (ROLE_ADMIN, ROLE_SELLER, ROLE_PRODUCTION)

ROLE_DESCRIPTIONS = {
    ROLE_ADMIN: "Full access: users, catalog, finances, reports",
    ROLE_SELLER: "Point of sale: sales and customers",
    ROLE_PRODUCTION: "Bakery floor: product stock replenishment",
}

# Route capability groups
CAN_SELL = (ROLE_ADMIN, ROLE_SELLER)
CAN_MANAGE_CUSTOMERS = (ROLE_ADMIN, ROLE_SELLER)
CAN_VIEW_CATALOG = ALL_ROLES
CAN_MANAGE_CATALOG = (ROLE_ADMIN,)
CAN_REPLENISH_STOCK = (ROLE_ADMIN, ROLE_PRODUCTION)
CAN_VIEW_INVENTORY = (ROLE_ADMIN, ROLE_PRODUCTION)
CAN_RECORD_FINANCE = (ROLE_ADMIN,)
CAN_MANAGE_USERS = (ROLE_ADMIN,)


def is_valid_role(role: str | None) -> bool:
    return role in ALL_ROLES


def is_allowed(role: str | None, required_roles) -> bool:
    """
    Allow/deny decision for an actor role against the roles a route admits.

    An empty required_roles means any authenticated actor.
    """
    if not is_valid_role(role):
        return False
    if not required_roles:
        return True
    return role in required_roles
