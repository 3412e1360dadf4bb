from django.urls import path

from . import views

app_name = "stock"

urlpatterns = [
    path("paddy/", views.PaddyStockView.as_view(), name="paddy"),
    path("paddy/export.csv", views.PaddyStockExportView.as_view(), name="paddy-export"),
    path("rice/", views.RiceStockView.as_view(), name="rice"),
    path("opening-balance/", views.OpeningBalanceView.as_view(), name="opening-balance"),
    path("outturns/<str:code>/by-products/", views.OutturnByProductsView.as_view(), name="outturn-by-products"),
]
