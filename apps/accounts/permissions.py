from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    """
    Permission: User must have the admin role.
    """

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin)


class IsStaffMember(permissions.BasePermission):
    """
    Permission: Admin or partner (back-office staff).
    """

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.is_admin or user.is_partner))


class IsMerchantUser(permissions.BasePermission):
    """
    Permission: Merchant portal user.
    """

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_merchant)


class IsAdminOrReadOnlyStaff(permissions.BasePermission):
    """
    Permission: Staff may read, only admins may write.
    """

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if request.method in permissions.SAFE_METHODS:
            return user.is_admin or user.is_partner
        return user.is_admin
