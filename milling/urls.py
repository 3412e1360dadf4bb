from django.urls import path

from . import views

app_name = "milling"

urlpatterns = [
    path("outturns/<int:pk>/clear/", views.OutturnClearView.as_view(), name="outturn-clear"),
    path(
        "outturns/<int:pk>/available-paddy-bags/",
        views.OutturnAvailableBagsView.as_view(),
        name="outturn-available-bags",
    ),
]
