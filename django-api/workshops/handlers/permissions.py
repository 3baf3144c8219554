from rest_framework.permissions import BasePermission

WORKSHOP_ROLES = frozenset(
    {"admin", "president", "workshop_coordinator", "beginners_coordinator"}
)


def is_coordinator(user) -> bool:
    has_any_role = getattr(user, "has_any_role", None)
    return has_any_role is not None and has_any_role(WORKSHOP_ROLES)


class HasWorkshopRole(BasePermission):
    """Allow only callers holding a workshop management role."""

    message = "Insufficient permissions"

    def has_permission(self, request, view) -> bool:
        return bool(request.user and request.user.is_authenticated) and is_coordinator(
            request.user
        )


class HasWorkshopRoleForWrites(HasWorkshopRole):
    """Let any authenticated caller read; writes need a workshop role."""

    def has_permission(self, request, view) -> bool:
        if request.method in ("GET", "HEAD", "OPTIONS"):
            return bool(request.user and request.user.is_authenticated)
        return super().has_permission(request, view)
