from django.urls import include, path

urlpatterns = [
    path("proposals/", include("proposal_export.urls")),
]
