import json
import re
from datetime import datetime
from io import BytesIO
from unittest import mock

from django.test import SimpleTestCase, override_settings
from django.urls import reverse
from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH

from .conf import get_export_settings
from .exceptions import ConfigurationError, RenderingFailure, UnsupportedFormat, UpstreamUnavailable
from .layout import Paginator, wrap_paragraph, wrap_text
from .services.docx_renderer import DocxRenderer, RtfRenderer
from .services.export_service import (
    DOCX_CONTENT_TYPE,
    PDF_CONTENT_TYPE,
    RTF_CONTENT_TYPE,
    ExportFormat,
    export_proposal,
)
from .services.pdf_renderer import BODY_FONT, BODY_SIZE, FooterCanvas, PdfRenderer, font_measure
from .utils import ProposalExportRequest, Section, export_filename, normalize_html, parse_hex_color

GENERATED_AT = datetime(2026, 2, 13, 10, 30)

SAMPLE_SECTIONS = [
    {
        "title": "Executive Summary",
        "content": "<p>We propose a <strong>modern</strong> website for Acme. "
        "It will be fast, accessible and easy to maintain.</p>",
        "order": 0,
    },
    {
        "title": "Deliverables",
        "content": "<p>The engagement covers:</p><ul><li>Design system</li><li>CMS integration</li></ul>",
        "order": 1,
    },
]


def _sample_request(**overrides):
    data = {
        "title": "Sample Web Development Proposal",
        "type": "PROJECT",
        "sections": [Section(**s) for s in SAMPLE_SECTIONS],
        "company_name": "Acme Studio",
    }
    data.update(overrides)
    return ProposalExportRequest(**data)


def _numbered_lines(count):
    body = "<br>".join(f"Line {i} of the detailed delivery plan" for i in range(1, count + 1))
    return f"<p>{body}</p>"


def _count_pages(pdf_bytes):
    return len(re.findall(rb"/Type /Page\b", pdf_bytes))


class RecordingCanvas(FooterCanvas):
    instances = []

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.drawn = []
        RecordingCanvas.instances.append(self)

    def drawString(self, x, y, text, *args, **kwargs):
        self.drawn.append((self.getPageNumber(), self._fontname, self._fontsize, text))
        return super().drawString(x, y, text, *args, **kwargs)


class NormalizeHtmlTests(SimpleTestCase):
    def test_paragraphs_and_lists(self):
        html = "<p>Hello <strong>world</strong></p><ul><li>One</li><li>Two</li></ul>"
        self.assertEqual(normalize_html(html), "Hello world\n\n• One\n• Two")

    def test_empty_input(self):
        self.assertEqual(normalize_html(""), "")
        self.assertEqual(normalize_html(None), "")

    def test_headings_divs_and_line_breaks(self):
        html = "<h2>Scope</h2><div>Line one<br>Line two<BR/>Line three</div>"
        self.assertEqual(normalize_html(html), "Scope\n\nLine one\nLine two\nLine three")

    def test_tag_names_are_case_insensitive(self):
        self.assertEqual(normalize_html("<P>Intro</P><UL><LI>Item</LI></UL>"), "Intro\n\n• Item")

    def test_ordered_lists_and_attributes(self):
        html = '<ol class="steps"><li data-id="1">Plan</li><li>Build</li></ol>'
        self.assertEqual(normalize_html(html), "• Plan\n• Build")

    def test_entities_are_decoded_after_tags_are_stripped(self):
        html = "<p>Fish &amp; Chips &lt;b&gt; &quot;fresh&quot; it&#39;s&nbsp;ready</p>"
        self.assertEqual(normalize_html(html), 'Fish & Chips <b> "fresh" it\'s ready')

    def test_amp_is_decoded_before_the_other_entities(self):
        self.assertEqual(normalize_html("&amp;lt;b&amp;gt;"), "<b>")
        self.assertEqual(normalize_html("&amp;nbsp;"), "&nbsp;")
        self.assertEqual(normalize_html("&amp;quot;ok&amp;#39;"), "\"ok'")

    def test_blank_line_runs_collapse_to_one(self):
        html = "<p>A</p><p></p><p> </p><p>B</p>"
        self.assertEqual(normalize_html(html), "A\n\nB")

    def test_plain_text_is_a_fixed_point(self):
        text = "Hello world\n\n• One\n• Two"
        self.assertEqual(normalize_html(normalize_html(text)), normalize_html(text))
        self.assertEqual(normalize_html(text), text)


class WrapTextTests(SimpleTestCase):
    def test_greedy_wrap(self):
        self.assertEqual(
            wrap_text("the quick brown fox jumps", len, 10),
            ["the quick", "brown fox", "jumps"],
        )

    def test_oversized_word_is_kept_whole(self):
        self.assertEqual(
            wrap_text("a supercalifragilistic b", len, 5),
            ["a", "supercalifragilistic", "b"],
        )

    def test_empty_input(self):
        self.assertEqual(wrap_text("", len, 10), [])

    def test_lines_fit_and_words_survive(self):
        measure = font_measure(BODY_FONT, BODY_SIZE)
        text = (
            "Our team will deliver a responsive marketing site with a headless CMS, "
            "automated accessibility checks, analytics dashboards and a staged rollout "
            "plan that keeps the current site live until launch day. Pneumonoultramicroscopicsilicovolcanoconiosis "
            "is included only to prove that long tokens survive intact."
        )
        max_width = 160
        lines = wrap_text(text, measure, max_width)
        self.assertGreater(len(lines), 3)
        for line in lines:
            if " " in line:
                self.assertLessEqual(measure(line), max_width)
        self.assertEqual(" ".join(lines).split(), text.split())

    def test_hard_line_breaks_are_kept(self):
        self.assertEqual(wrap_paragraph("• One\n• Two", len, 50), ["• One", "• Two"])


class _Sink:
    def __init__(self):
        self.pages = 0

    def showPage(self):
        self.pages += 1


class PaginatorTests(SimpleTestCase):
    def setUp(self):
        self.sink = _Sink()
        self.paginator = Paginator(self.sink, page_height=100, top_margin=10, bottom_margin=10)

    def test_cursor_starts_at_top_margin(self):
        self.assertEqual(self.paginator.cursor, 90)
        self.assertEqual(self.paginator.page_count, 1)

    def test_new_page_when_space_runs_out(self):
        self.assertFalse(self.paginator.ensure_space(50))
        self.paginator.advance(50)
        self.assertTrue(self.paginator.ensure_space(31))
        self.assertEqual(self.sink.pages, 1)
        self.assertEqual(self.paginator.page_count, 2)
        self.assertEqual(self.paginator.cursor, 90)

    def test_exact_fit_stays_on_page(self):
        self.paginator.advance(40)
        self.assertFalse(self.paginator.ensure_space(40))
        self.assertEqual(self.sink.pages, 0)

    def test_oversized_element_overflows_instead_of_adding_blank_pages(self):
        self.assertFalse(self.paginator.ensure_space(500))
        self.paginator.advance(500)
        self.assertEqual(self.sink.pages, 0)
        self.assertTrue(self.paginator.ensure_space(1))
        self.assertEqual(self.paginator.page_count, 2)


class PdfRendererTests(SimpleTestCase):
    def setUp(self):
        RecordingCanvas.instances.clear()

    def _render(self, request, **kwargs):
        kwargs.setdefault("compress", False)
        return PdfRenderer(**kwargs).render(request, generated_at=GENERATED_AT)

    def _record(self, request):
        PdfRenderer(canvas_class=RecordingCanvas, compress=False).render(request, generated_at=GENERATED_AT)
        return RecordingCanvas.instances[-1].drawn

    def test_short_proposal_fits_on_one_page(self):
        pdf = self._render(_sample_request())
        self.assertTrue(pdf.startswith(b"%PDF-"))
        self.assertEqual(_count_pages(pdf), 1)
        self.assertIn(b"Page 1 of 1", pdf)
        self.assertIn(b"February 13, 2026", pdf)

    def test_long_section_spans_two_pages(self):
        request = _sample_request(
            sections=[Section(title="Delivery Plan", content=_numbered_lines(60), order=0)],
            company_name=None,
        )
        pdf = self._render(request)
        self.assertEqual(_count_pages(pdf), 2)
        self.assertIn(b"Page 1 of 2", pdf)
        self.assertIn(b"Page 2 of 2", pdf)

    def test_heading_is_kept_with_its_first_line(self):
        # The first section leaves room for the next heading alone but not for
        # the heading plus one body line.
        request = _sample_request(
            company_name=None,
            sections=[
                Section(title="Delivery Plan", content=_numbered_lines(29), order=0),
                Section(title="Second Section", content="<p>Opening line of the second section.</p>", order=1),
            ],
        )
        drawn = self._record(request)
        heading_page = next(page for page, _, _, text in drawn if text == "Second Section")
        body_page = next(page for page, _, _, text in drawn if text == "Opening line of the second section.")
        self.assertEqual(heading_page, body_page)
        self.assertEqual(heading_page, 2)

    def test_sections_render_in_input_order(self):
        request = _sample_request(
            sections=[
                Section(title="Pricing", content="<p>Fixed fee.</p>", order=5),
                Section(title="Approach", content="<p>Agile.</p>", order=1),
                Section(title="Team", content="<p>Four people.</p>", order=1),
            ]
        )
        drawn = [text for _, _, _, text in self._record(request)]
        positions = [drawn.index(title) for title in ("Pricing", "Approach", "Team")]
        self.assertEqual(positions, sorted(positions))

    def test_empty_section_still_gets_its_heading(self):
        request = _sample_request(sections=[Section(title="Appendix", content="", order=0)])
        drawn = [text for _, _, _, text in self._record(request)]
        self.assertIn("Appendix", drawn)

    def test_branding_and_subtitle(self):
        drawn = [text for _, _, _, text in self._record(_sample_request())]
        self.assertIn("Sample Web Development Proposal", drawn)
        self.assertIn("PROJECT PROPOSAL", drawn)
        self.assertIn("Acme Studio", drawn)

    def test_body_lines_stay_within_content_width(self):
        long_paragraph = " ".join(["Implementation milestones are reviewed with stakeholders every sprint."] * 20)
        request = _sample_request(sections=[Section(title="Plan", content=f"<p>{long_paragraph}</p>")])
        renderer = PdfRenderer(canvas_class=RecordingCanvas, compress=False)
        renderer.render(request, generated_at=GENERATED_AT)
        measure = font_measure(BODY_FONT, BODY_SIZE)
        body = [
            text
            for _, font, size, text in RecordingCanvas.instances[-1].drawn
            if font == BODY_FONT and size == BODY_SIZE
        ]
        self.assertGreater(len(body), 5)
        for line in body:
            self.assertLessEqual(measure(line), renderer.content_width)

    def test_adding_a_section_never_reduces_page_count(self):
        sections = [Section(title=f"Part {i}", content=_numbered_lines(12), order=i) for i in range(6)]
        previous = 0
        for size in range(1, len(sections) + 1):
            pages = _count_pages(self._render(_sample_request(sections=sections[:size])))
            self.assertGreaterEqual(pages, previous)
            previous = pages
        self.assertGreater(previous, 1)

    def test_default_colour_fills_accents(self):
        pdf = self._render(_sample_request(), default_color="#FF0000")
        self.assertIn(b"1 0 0 rg", pdf)
        self.assertIn(b"1 0 0 RG", pdf)

    def test_primary_color_wins_over_default(self):
        pdf = self._render(_sample_request(primary_color="#00FF00"), default_color="#FF0000")
        self.assertIn(b"0 1 0 rg", pdf)
        self.assertNotIn(b"1 0 0 rg", pdf)

    def test_compressed_output_is_still_a_pdf(self):
        pdf = PdfRenderer().render(_sample_request(), generated_at=GENERATED_AT)
        self.assertTrue(pdf.startswith(b"%PDF-"))
        self.assertEqual(_count_pages(pdf), 1)


class DocxRendererTests(SimpleTestCase):
    def _document(self, request):
        return Document(BytesIO(DocxRenderer().render(request, generated_at=GENERATED_AT)))

    def test_structure_and_order(self):
        doc = self._document(_sample_request())
        texts = [p.text for p in doc.paragraphs]
        self.assertEqual(texts[0], "Sample Web Development Proposal")
        self.assertIn("PROJECT PROPOSAL", texts)
        self.assertIn("Acme Studio", texts)
        headings = [p.text for p in doc.paragraphs if p.style.name == "Heading 1"]
        self.assertEqual(headings, ["Executive Summary", "Deliverables"])
        self.assertIn("• Design system\n• CMS integration", texts)

    def test_body_paragraphs_are_justified(self):
        doc = self._document(_sample_request())
        body = next(p for p in doc.paragraphs if p.text.startswith("We propose"))
        self.assertEqual(body.alignment, WD_ALIGN_PARAGRAPH.JUSTIFY)

    def test_footer_is_appended_once(self):
        doc = self._document(_sample_request())
        footer = doc.paragraphs[-1].text
        self.assertEqual(footer, "Generated with Proposal Studio • February 13, 2026")
        self.assertEqual(sum("Generated with Proposal Studio" in p.text for p in doc.paragraphs), 1)

    def test_empty_section_keeps_heading(self):
        doc = self._document(_sample_request(sections=[Section(title="Appendix", content="")]))
        headings = [p.text for p in doc.paragraphs if p.style.name == "Heading 1"]
        self.assertEqual(headings, ["Appendix"])

    def test_brand_colour_on_headings_and_rule(self):
        doc = self._document(_sample_request(primary_color="#0B98CE"))
        heading = next(p for p in doc.paragraphs if p.style.name == "Heading 1")
        self.assertEqual(str(heading.runs[0].font.color.rgb), "0B98CE")
        self.assertIn('w:color="0B98CE"', doc.element.xml)

    def test_default_colour_without_primary_color(self):
        data = DocxRenderer(default_color="#FF0000").render(_sample_request(), generated_at=GENERATED_AT)
        heading = next(p for p in Document(BytesIO(data)).paragraphs if p.style.name == "Heading 1")
        self.assertEqual(str(heading.runs[0].font.color.rgb), "FF0000")

    def test_control_characters_are_dropped(self):
        request = _sample_request(
            title="Plan\x0b2026",
            company_name="Acme\x01 Studio",
            sections=[Section(title="Scope\x0c", content="<p>a\x0bb\x00c</p>")],
        )
        doc = self._document(request)
        texts = [p.text for p in doc.paragraphs]
        self.assertEqual(texts[0], "Plan2026")
        self.assertIn("Acme Studio", texts)
        self.assertIn("Scope", texts)
        self.assertIn("abc", texts)
        self.assertEqual(doc.core_properties.title, "Plan2026")


class RtfRendererTests(SimpleTestCase):
    def test_plain_rtf_document(self):
        request = _sample_request(title="Plan {v2}")
        data = RtfRenderer().render(request, generated_at=GENERATED_AT)
        self.assertTrue(data.startswith(b"{\\rtf1"))
        self.assertTrue(data.rstrip().endswith(b"}"))
        self.assertIn(b"Plan \\{v2\\}", data)
        self.assertIn(b"\\u8226?", data)
        self.assertLess(data.index(b"Executive Summary"), data.index(b"Deliverables"))


class ExportServiceTests(SimpleTestCase):
    def test_pdf_export(self):
        result = export_proposal(_sample_request(), "PDF", generated_at=GENERATED_AT)
        self.assertEqual(result.content_type, PDF_CONTENT_TYPE)
        self.assertEqual(result.file_name, "Sample_Web_Development_Proposal.pdf")
        self.assertEqual(result.size_bytes, len(result.buffer))
        self.assertTrue(result.buffer.startswith(b"%PDF-"))

    def test_docx_export(self):
        result = export_proposal(_sample_request(), ExportFormat.DOCX)
        self.assertEqual(result.content_type, DOCX_CONTENT_TYPE)
        self.assertEqual(result.file_name, "Sample_Web_Development_Proposal.docx")
        self.assertTrue(result.buffer.startswith(b"PK"))

    def test_format_is_case_insensitive(self):
        self.assertIs(ExportFormat.parse("pdf"), ExportFormat.PDF)
        self.assertIs(ExportFormat.parse(" Docx "), ExportFormat.DOCX)

    def test_unknown_format_is_rejected_before_rendering(self):
        with mock.patch("proposal_export.services.export_service._select_backend") as select:
            with self.assertRaises(UnsupportedFormat) as ctx:
                export_proposal(_sample_request(), "xlsx")
        select.assert_not_called()
        self.assertEqual(ctx.exception.error_code, "ERR_EXPORT_FORMAT")

    @override_settings(PROPOSAL_EXPORT={"PDF_BACKEND": "disabled"})
    def test_disabled_backend_fails_fast(self):
        with self.assertRaises(UpstreamUnavailable) as ctx:
            export_proposal(_sample_request(), "PDF")
        self.assertIn("temporarily unavailable", ctx.exception.message)

    @override_settings(PROPOSAL_EXPORT={"DOCX_BACKEND": "rtf"})
    def test_rtf_fallback_keeps_docx_name(self):
        result = export_proposal(_sample_request(), "DOCX")
        self.assertEqual(result.content_type, RTF_CONTENT_TYPE)
        self.assertEqual(result.file_name, "Sample_Web_Development_Proposal.docx")
        self.assertTrue(result.buffer.startswith(b"{\\rtf1"))

    @override_settings(PROPOSAL_EXPORT={"PAGE_SIZE": "LETTER", "FOOTER_LABEL": "Acme Proposals", "PDF_COMPRESSION": False})
    def test_settings_reach_the_pdf_renderer(self):
        result = export_proposal(_sample_request(), "PDF", generated_at=GENERATED_AT)
        self.assertIn(b"Acme Proposals", result.buffer)
        self.assertIn(b"612 792", result.buffer)

    def test_renderer_errors_become_rendering_failures(self):
        with mock.patch(
            "proposal_export.services.export_service.PdfRenderer.render",
            side_effect=RuntimeError("font embedding failed"),
        ):
            with self.assertRaises(RenderingFailure) as ctx:
                export_proposal(_sample_request(), "PDF")
        self.assertEqual(ctx.exception.details, "font embedding failed")

    def test_filename_replaces_every_non_alphanumeric(self):
        self.assertEqual(export_filename("Q1 Proposal: Acme/Co", "pdf"), "Q1_Proposal__Acme_Co.pdf")

    @override_settings(PROPOSAL_EXPORT={"DOCX_BACKEND": "carrier-pigeon"})
    def test_unknown_backend_setting(self):
        with self.assertRaises(ConfigurationError) as ctx:
            get_export_settings()
        self.assertEqual(ctx.exception.error_code, "ERR_EXPORT_CONFIG")

    @override_settings(PROPOSAL_EXPORT={"DEFAULT_PRIMARY_COLOR": "indigo"})
    def test_invalid_default_colour_setting(self):
        with self.assertRaises(ConfigurationError):
            get_export_settings()

    @override_settings(PROPOSAL_EXPORT={"DEFAULT_PRIMARY_COLOR": "#ff0000"})
    def test_default_colour_setting_reaches_docx(self):
        self.assertEqual(get_export_settings().default_primary_color, "#FF0000")
        result = export_proposal(_sample_request(), "DOCX")
        heading = next(p for p in Document(BytesIO(result.buffer)).paragraphs if p.style.name == "Heading 1")
        self.assertEqual(str(heading.runs[0].font.color.rgb), "FF0000")

    @override_settings(PROPOSAL_EXPORT={"DEFAULT_PRIMARY_COLOR": "#FF0000", "PDF_COMPRESSION": False})
    def test_default_colour_setting_reaches_pdf(self):
        result = export_proposal(_sample_request(), "PDF")
        self.assertIn(b"1 0 0 rg", result.buffer)

    @override_settings(PROPOSAL_EXPORT={"DEFAULT_PRIMARY_COLOR": "#FF0000", "DOCX_BACKEND": "rtf"})
    def test_default_colour_setting_reaches_rtf(self):
        result = export_proposal(_sample_request(), "DOCX")
        self.assertIn(b"\\red255\\green0\\blue0;", result.buffer)

    def test_pasted_control_characters_export_in_both_formats(self):
        request = _sample_request(sections=[Section(title="Notes", content="<p>a\x0bb</p>")])
        self.assertTrue(export_proposal(request, "PDF").buffer.startswith(b"%PDF-"))
        self.assertTrue(export_proposal(request, "DOCX").buffer.startswith(b"PK"))


class ExportRequestTests(SimpleTestCase):
    def test_title_is_required(self):
        with self.assertRaises(ValueError):
            ProposalExportRequest(title="  ", type="PROJECT")

    def test_sections_are_frozen(self):
        request = ProposalExportRequest(title="T", type="X", sections=[Section(title="A")])
        self.assertIsInstance(request.sections, tuple)

    def test_brand_color_default(self):
        request = ProposalExportRequest(title="T", type="X")
        self.assertEqual(request.brand_color(), "#4F46E5")
        self.assertEqual(request.brand_color("#FF0000"), "#FF0000")
        branded = ProposalExportRequest(title="T", type="X", primary_color="#0B98CE")
        self.assertEqual(branded.brand_color("#FF0000"), "#0B98CE")

    def test_parse_hex_color(self):
        self.assertEqual(parse_hex_color("#0b98ce"), "#0B98CE")
        self.assertEqual(parse_hex_color("0b98ce"), "#0B98CE")
        self.assertIsNone(parse_hex_color(""))
        self.assertIsNone(parse_hex_color(None))
        for bad in ("blue", "#FFF", "#12345G", "#+12345", "#12_456"):
            with self.subTest(value=bad), self.assertRaises(ValueError):
                parse_hex_color(bad)


class ExportViewTests(SimpleTestCase):
    def _payload(self, **overrides):
        payload = {
            "title": "Q1 Proposal: Acme/Co",
            "type": "PROJECT",
            "sections": SAMPLE_SECTIONS,
            "company_name": "Acme Studio",
            "primary_color": "#0B98CE",
            "format": "PDF",
        }
        payload.update(overrides)
        return payload

    def _post(self, payload, name="export_proposal"):
        return self.client.post(reverse(name), data=json.dumps(payload), content_type="application/json")

    def test_pdf_download(self):
        with self.assertLogs("proposal_export.views", level="INFO") as logs:
            response = self._post(self._payload())
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], PDF_CONTENT_TYPE)
        self.assertEqual(response["Content-Disposition"], 'attachment; filename="Q1_Proposal__Acme_Co.pdf"')
        self.assertEqual(response["Content-Length"], str(len(response.content)))
        self.assertEqual(response["Cache-Control"], "no-store")
        self.assertTrue(response.content.startswith(b"%PDF-"))
        self.assertIn("status=COMPLETED", logs.output[0])
        self.assertIn("file_name=Q1_Proposal__Acme_Co.pdf", logs.output[0])

    def test_docx_download(self):
        response = self._post(self._payload(format="docx"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], DOCX_CONTENT_TYPE)
        self.assertIn('filename="Q1_Proposal__Acme_Co.docx"', response["Content-Disposition"])

    def test_inline_pdf_preview(self):
        response = self._post(self._payload(inline=True))
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response["Content-Disposition"].startswith("inline;"))

    def test_pdf_route_ignores_requested_format(self):
        response = self._post(self._payload(format="DOCX"), name="export_proposal_pdf")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], PDF_CONTENT_TYPE)

    def test_form_encoded_payload(self):
        payload = self._payload(sections=json.dumps(SAMPLE_SECTIONS))
        response = self.client.post(reverse("export_proposal"), data=payload)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], PDF_CONTENT_TYPE)

    def test_unsupported_format(self):
        response = self._post(self._payload(format="XLSX"))
        self.assertEqual(response.status_code, 400)
        self.assertIn("format", response.json()["details"])

    def test_missing_title(self):
        response = self._post(self._payload(title=""))
        self.assertEqual(response.status_code, 400)
        self.assertIn("title", response.json()["details"])

    def test_bad_primary_color(self):
        response = self._post(self._payload(primary_color="teal"))
        self.assertEqual(response.status_code, 400)
        self.assertIn("primary_color", response.json()["details"])

    def test_malformed_sections(self):
        response = self._post(self._payload(sections=[{"content": "<p>No title</p>"}]))
        self.assertEqual(response.status_code, 400)
        self.assertIn("sections", response.json()["details"])

    def test_body_must_be_a_json_object(self):
        response = self.client.post(reverse("export_proposal"), data="[1, 2]", content_type="application/json")
        self.assertEqual(response.status_code, 400)

    @override_settings(PROPOSAL_EXPORT={"DOCX_BACKEND": "disabled"})
    def test_disabled_docx_returns_503(self):
        with self.assertLogs("proposal_export.views", level="WARNING"):
            response = self._post(self._payload(format="DOCX"))
        self.assertEqual(response.status_code, 503)
        self.assertIn("Please use PDF export instead", response.json()["error"])

    def test_rendering_failure_returns_500(self):
        with mock.patch(
            "proposal_export.services.export_service.PdfRenderer.render",
            side_effect=RuntimeError("boom"),
        ):
            response = self._post(self._payload())
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], "Failed to export proposal")

    @override_settings(PROPOSAL_EXPORT={"PAGE_SIZE": "A3"})
    def test_bad_configuration_returns_json_500(self):
        with self.assertLogs("proposal_export.views", level="ERROR"):
            response = self._post(self._payload())
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["details"], "ERR_EXPORT_CONFIG")

    def test_get_is_not_allowed(self):
        response = self.client.get(reverse("export_proposal"))
        self.assertEqual(response.status_code, 405)
