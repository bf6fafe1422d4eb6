"""Role permission names and the default role sets seeded into every workspace."""

WILDCARD_PERMISSION = "*"

WORKSPACE_UPDATE = "workspace.update"
WORKSPACE_DELETE = "workspace.delete"
WORKSPACE_MEMBERS_INVITE = "workspace.members.invite"
WORKSPACE_MEMBERS_REMOVE = "workspace.members.remove"
WORKSPACE_MEMBERS_UPDATE = "workspace.members.update"

POSTS_VIEW = "posts.view"
POSTS_CREATE = "posts.create"
POSTS_EDIT = "posts.edit"
POSTS_DELETE = "posts.delete"
POSTS_PUBLISH = "posts.publish"
POSTS_APPROVE = "posts.approve"

PLATFORMS_VIEW = "platforms.view"
PLATFORMS_CONNECT = "platforms.connect"
PLATFORMS_DISCONNECT = "platforms.disconnect"

ANALYTICS_VIEW = "analytics.view"

DEFAULT_ROLE_PERMISSIONS = {
    "Admin": [WILDCARD_PERMISSION],
    "Publisher": [
        POSTS_VIEW, POSTS_CREATE, POSTS_EDIT, POSTS_DELETE, POSTS_PUBLISH, POSTS_APPROVE,
        PLATFORMS_VIEW, PLATFORMS_CONNECT, PLATFORMS_DISCONNECT,
        ANALYTICS_VIEW,
    ],
    "Creator": [POSTS_VIEW, POSTS_CREATE, POSTS_EDIT, PLATFORMS_VIEW, ANALYTICS_VIEW],
    "Viewer": [POSTS_VIEW, PLATFORMS_VIEW, ANALYTICS_VIEW],
}
DEFAULT_ROLE_NAME = "Creator"


def is_admin(permissions) -> bool:
    return WILDCARD_PERMISSION in (permissions or [])
