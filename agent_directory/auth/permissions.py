"""Permission catalog and the built-in roles that hold them."""

CRUD_RESOURCES = ("agents", "templates", "technologies", "platforms", "tags")

PERMISSIONS: list[tuple[str, str, str]] = [
    # (resource, action, description)
    ("users", "read", "View users"),
    ("users", "create", "Create users"),
    ("users", "update", "Update users"),
    ("users", "delete", "Deactivate users"),
    ("users", "assign_role", "Assign roles"),
    ("users", "remove_role", "Remove roles"),
    ("projects", "read", "View projects"),
    ("projects", "create", "Create projects"),
    ("projects", "update", "Update projects"),
    ("projects", "delete", "Archive projects"),
    ("projects", "manage_members", "Manage project members"),
    *[
        (resource, action, f"{action.capitalize()} {resource}")
        for resource in CRUD_RESOURCES
        for action in ("read", "create", "update", "delete")
    ],
    ("audit", "read", "View audit logs"),
    ("audit", "export", "Export audit logs"),
]

ALL_PERMISSION_NAMES = frozenset(f"{resource}.{action}" for resource, action, _ in PERMISSIONS)

ADMIN_ROLE = "Admin"
USER_ROLE = "User"

# Admin holds the whole catalog; User is the default role for new accounts
ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    ADMIN_ROLE: ALL_PERMISSION_NAMES,
    USER_ROLE: frozenset(
        {
            "projects.read",
            "projects.create",
            "projects.update",
            "agents.read",
            "agents.create",
            "agents.update",
            "templates.read",
            "technologies.read",
            "platforms.read",
            "tags.read",
        }
    ),
}
