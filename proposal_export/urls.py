from django.urls import path

from .views import export_pdf_view, export_proposal_view

urlpatterns = [
    path("export/", export_proposal_view, name="export_proposal"),
    path("export-pdf/", export_pdf_view, name="export_proposal_pdf"),
]
