from rest_framework import permissions

from utils.rbac import is_moderator, is_seller


class IsModerator(permissions.BasePermission):
    """
    Allows access only to platform moderators.
    """

    message = "Only moderators can review listings."

    def has_permission(self, request, view):
        return is_moderator(request.user)


class IsSeller(permissions.BasePermission):
    """
    Allows access only to sellers.
    """

    message = "Only sellers can manage listing submissions."

    def has_permission(self, request, view):
        return is_seller(request.user)


class IsSellerOrModerator(permissions.BasePermission):
    """
    Allows access to sellers and moderators. Ownership is checked per record.
    """

    def has_permission(self, request, view):
        return is_moderator(request.user) or is_seller(request.user)
