"""URL configuration for the ricemill project."""
from django.contrib import admin
from django.urls import include, path

from ricemill.views import healthz

admin.site.site_header = "Rice Mill Administration"
admin.site.site_title = "Rice Mill Administration"
admin.site.index_title = "Stock and production"

urlpatterns = [
    path("admin/", admin.site.urls),
    path("healthz/", healthz, name="healthz"),
    path("api/stock/", include("stock.urls", namespace="stock")),
    path("api/milling/", include("milling.urls", namespace="milling")),
]
