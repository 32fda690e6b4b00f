from __future__ import annotations

import json
import logging

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.http import require_POST

from .exceptions import ConfigurationError, RenderingFailure, UnsupportedFormat, UpstreamUnavailable
from .forms import ProposalExportForm
from .services.export_service import ExportFormat, ExportResult, export_proposal

logger = logging.getLogger(__name__)


def _request_payload(request: HttpRequest) -> dict | None:
    content_type = (request.content_type or "").lower()
    if content_type == "application/json":
        try:
            payload = json.loads(request.body or b"{}")
        except (ValueError, UnicodeDecodeError):
            return None
        return payload if isinstance(payload, dict) else None
    return request.POST


def _log_export(fmt: str, file_name: str, size_bytes: int, status: str) -> None:
    level = logging.INFO if status == "COMPLETED" else logging.WARNING
    logger.log(
        level,
        "export format=%s file_name=%s size_bytes=%d status=%s",
        fmt,
        file_name,
        size_bytes,
        status,
    )


def _file_response(result: ExportResult, inline: bool = False) -> HttpResponse:
    response = HttpResponse(result.buffer, content_type=result.content_type)
    disposition = "inline" if inline else "attachment"
    response["Content-Disposition"] = f'{disposition}; filename="{result.file_name}"'
    response["Content-Length"] = str(result.size_bytes)
    response["Cache-Control"] = "no-store"
    return response


def _export(request: HttpRequest, forced_format: ExportFormat | None = None) -> HttpResponse:
    payload = _request_payload(request)
    if payload is None:
        return JsonResponse({"error": "Request body must be a JSON object."}, status=400)

    form = ProposalExportForm(payload)
    if not form.is_valid():
        return JsonResponse(
            {"error": "Invalid export request", "details": form.errors.get_json_data()},
            status=400,
        )

    fmt = forced_format or form.cleaned_data["format"]
    export_request = form.to_export_request()
    try:
        result = export_proposal(export_request, fmt)
    except UnsupportedFormat as exc:
        return JsonResponse({"error": exc.message}, status=400)
    except UpstreamUnavailable as exc:
        _log_export(fmt.value, "", 0, "FAILED")
        return JsonResponse({"error": exc.message}, status=503)
    except RenderingFailure as exc:
        _log_export(fmt.value, "", 0, "FAILED")
        return JsonResponse({"error": exc.message, "details": exc.details}, status=500)
    except ConfigurationError as exc:
        logger.error("export configuration invalid: %s", exc.message)
        _log_export(fmt.value, "", 0, "FAILED")
        return JsonResponse({"error": "Export is misconfigured", "details": exc.error_code}, status=500)

    _log_export(fmt.value, result.file_name, result.size_bytes, "COMPLETED")
    inline = bool(form.cleaned_data.get("inline")) and fmt is ExportFormat.PDF
    return _file_response(result, inline=inline)


@require_POST
def export_proposal_view(request: HttpRequest) -> HttpResponse:
    return _export(request)


@require_POST
def export_pdf_view(request: HttpRequest) -> HttpResponse:
    return _export(request, forced_format=ExportFormat.PDF)
