from django.contrib.auth.mixins import LoginRequiredMixin, UserPassesTestMixin
from django.http import JsonResponse
from django.urls import reverse_lazy


class StaffRequiredMixin(LoginRequiredMixin, UserPassesTestMixin):
    """Mixin that restricts access to authenticated staff users only."""

    login_url = reverse_lazy("admin:login")
    raise_exception = False

    def test_func(self):
        user = self.request.user
        return bool(user and user.is_authenticated and user.is_staff)


class StaffApiMixin(StaffRequiredMixin):
    """Staff-only access for JSON endpoints: answer with a JSON error instead
    of redirecting to the login page."""

    def handle_no_permission(self):
        user = getattr(self.request, "user", None)
        if user and user.is_authenticated:
            return JsonResponse({"error": "Staff access required."}, status=403)
        return JsonResponse({"error": "Authentication required."}, status=401)
