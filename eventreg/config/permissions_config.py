"""
Permissions and Roles Configuration
This config defines the default permission catalog of the hackathon registration app.
Used by the bootstrap routine to replace the roles/permissions tables in one transaction.

Permission slugs follow "entity:action:scope".
"""

BLANKET = "all"

# Entities and the actions that are valid on each of them
ENTITIES = {
    "user": {
        "actions": ["create", "read", "update", "delete"],
        "description": "Participant accounts and profiles"
    },
    "registration": {
        "actions": ["approve", "reject", "read"],
        "description": "Event registrations"
    },
    "team": {
        "actions": ["create", "join", "manage"],
        "description": "Hackathon teams"
    },
    "submission": {
        "actions": ["submit", "review", "read"],
        "description": "Project submissions"
    },
    "event": {
        "actions": ["register", "manage", "read"],
        "description": "Events and their application forms"
    },
    "role": {
        "actions": ["manage", "read"],
        "description": "Roles, permissions and their assignments"
    },
}

STATIC_SCOPES = {
    "all": "every instance",
    "any": "any single instance",
    "self": "the caller's own instance",
}

# Permission required by the administrative grant endpoints
GRANT_ADMIN_PERMISSION = "role:manage:all"

ROLES = {
    "admin": {
        "description": "Full access to every entity",
        "permissions": [f"{entity}:{BLANKET}:{BLANKET}" for entity in ENTITIES],
    },
    "organizer": {
        "description": "Runs events and reviews registrations",
        "permissions": [
            "event:manage:all",
            "event:read:all",
            "registration:approve:all",
            "registration:reject:all",
            "registration:read:all",
            "team:manage:all",
            "user:read:all",
            "submission:read:all",
        ],
    },
    "judge": {
        "description": "Reviews project submissions",
        "permissions": [
            "submission:review:any",
            "submission:read:all",
            "event:read:all",
        ],
    },
    "participant": {
        "description": "Registered hacker",
        "permissions": [
            "user:read:self",
            "user:update:self",
            "registration:read:self",
            "event:read:all",
            "event:register:self",
            "team:create:any",
            "team:join:any",
            "submission:submit:self",
            "submission:read:self",
        ],
    },
}


def get_permission_matrix():
    """
    Returns the catalog as plain data
    Format: {
        "permissions": [
            {"slug": "user:read:self", "description": "..."},
            ...
        ],
        "roles": [
            {"slug": "participant", "description": "...", "permissions": ["user:read:self", ...]},
            ...
        ]
    }
    """
    permissions = []

    for entity, entity_config in ENTITIES.items():
        permissions.append({
            "slug": f"{entity}:{BLANKET}:{BLANKET}",
            "description": f"Every action on {entity_config['description'].lower()}"
        })
        for action in entity_config["actions"]:
            for scope, scope_description in STATIC_SCOPES.items():
                permissions.append({
                    "slug": f"{entity}:{action}:{scope}",
                    "description": f"{action.capitalize()} {entity} ({scope_description})"
                })

    roles = [
        {
            "slug": slug,
            "description": role_config["description"],
            "permissions": sorted(role_config["permissions"])
        }
        for slug, role_config in ROLES.items()
    ]

    return {
        "permissions": permissions,
        "roles": roles
    }


PERMISSION_MATRIX = get_permission_matrix()
