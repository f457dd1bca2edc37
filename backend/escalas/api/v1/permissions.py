from rest_framework.permissions import SAFE_METHODS, BasePermission


class _ModelPermission(BasePermission):
    """Leitura para autenticados; escrita exige a permissão ``perm``."""
    perm = ""

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return True
        return user.has_perm(self.perm)


class CanManagePeriods(_ModelPermission):
    perm = "escalas.change_scheduleperiod"


class CanManageEvents(_ModelPermission):
    perm = "escalas.change_scheduleevent"


class CanManageAssignments(_ModelPermission):
    perm = "escalas.change_scheduleassignment"
