"""Well-known role names.

Roles are stored as rows (``Role``) so new ones can be added without a
deploy; the core only ever checks for the names below.
"""

ADMIN_ROLE = "ROLE_ADMIN"
CLIENT_ROLE = "ROLE_CLIENT"

DEFAULT_ROLES = (ADMIN_ROLE, CLIENT_ROLE)
