from django import forms
from django.core.exceptions import ValidationError

from .exceptions import UnsupportedFormat
from .services.export_service import ExportFormat
from .utils import ProposalExportRequest, Section, parse_hex_color

MAX_SECTIONS = 200


class ProposalExportForm(forms.Form):
    title = forms.CharField(label="Title", max_length=300)
    type = forms.CharField(label="Proposal Type", max_length=100, required=False)
    sections = forms.JSONField(label="Sections", required=False)
    company_name = forms.CharField(label="Company Name", max_length=200, required=False)
    primary_color = forms.CharField(label="Primary Color", max_length=7, required=False)
    format = forms.CharField(label="Format", max_length=10, required=False, initial="PDF")
    inline = forms.BooleanField(label="Open in browser", required=False)

    def clean_format(self):
        value = self.cleaned_data.get("format") or "PDF"
        try:
            return ExportFormat.parse(value)
        except UnsupportedFormat as exc:
            raise ValidationError(exc.message)

    def clean_primary_color(self):
        value = self.cleaned_data.get("primary_color")
        try:
            return parse_hex_color(value)
        except ValueError:
            raise ValidationError("Primary color must be a hex value like #4F46E5.")

    def clean_sections(self):
        raw = self.cleaned_data.get("sections")
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise ValidationError("Sections must be a list.")
        if len(raw) > MAX_SECTIONS:
            raise ValidationError(f"A proposal can have at most {MAX_SECTIONS} sections.")

        sections = []
        for index, item in enumerate(raw):
            if not isinstance(item, dict):
                raise ValidationError(f"Section {index + 1} must be an object.")
            title = item.get("title")
            if not isinstance(title, str):
                raise ValidationError(f"Section {index + 1} is missing a title.")
            content = item.get("content")
            if content is not None and not isinstance(content, str):
                raise ValidationError(f"Section {index + 1} content must be text.")
            order = item.get("order", index)
            try:
                order = int(order)
            except (TypeError, ValueError):
                raise ValidationError(f"Section {index + 1} order must be a whole number.")
            sections.append(Section(title=title, content=content or "", order=order))
        return sections

    def to_export_request(self) -> ProposalExportRequest:
        data = self.cleaned_data
        return ProposalExportRequest(
            title=data["title"],
            type=data.get("type") or "",
            sections=tuple(data.get("sections") or ()),
            company_name=data.get("company_name") or None,
            primary_color=data.get("primary_color"),
        )
