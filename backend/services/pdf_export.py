"""Render the reviewed resume to a downloadable PDF with reportlab."""

import io
import logging
from xml.sax.saxutils import escape

from reportlab.lib.colors import black, white
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer

from models.schemas.resume_data import ResumeData

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "optimized-resume.pdf"

STYLES = {
    "name": ParagraphStyle(
        name="Name", fontName="Helvetica-Bold", fontSize=18, leading=22,
        alignment=TA_CENTER, spaceAfter=4,
    ),
    "contact": ParagraphStyle(
        name="Contact", fontName="Helvetica", fontSize=9, leading=11,
        alignment=TA_CENTER, spaceAfter=10,
    ),
    "section": ParagraphStyle(
        name="Section", fontName="Helvetica-Bold", fontSize=11, leading=13,
        alignment=TA_LEFT, spaceBefore=8,
    ),
    "entry": ParagraphStyle(
        name="Entry", fontName="Helvetica-Bold", fontSize=10, leading=12, alignment=TA_LEFT,
    ),
    "body": ParagraphStyle(
        name="Body", fontName="Helvetica", fontSize=10, leading=12, alignment=TA_LEFT,
    ),
    "bullet": ParagraphStyle(
        name="Bullet", fontName="Helvetica", fontSize=10, leading=12,
        leftIndent=15, firstLineIndent=-10, alignment=TA_LEFT,
    ),
}


def _p(text: str, style: str) -> Paragraph:
    return Paragraph(escape(text), STYLES[style])


def _section(title: str) -> list:
    return [
        _p(title.upper(), "section"),
        HRFlowable(width="100%", thickness=0.75, color=black, spaceBefore=1, spaceAfter=4),
    ]


def _with_right(left: str, right: str) -> str:
    return f"{left} | {right}" if left and right else left or right


def _structured_flowables(data: ResumeData) -> list:
    flowables = []
    info = data.personal_info
    if info.full_name:
        flowables.append(_p(info.full_name, "name"))
    contact = [c for c in (info.phone, info.email, info.linkedin, info.github, info.website) if c]
    if contact:
        flowables.append(_p(" | ".join(contact), "contact"))

    if data.education:
        flowables += _section("Education")
        for edu in data.education:
            flowables.append(_p(_with_right(edu.school, edu.location), "entry"))
            degree = " in ".join(x for x in (edu.degree, edu.field) if x)
            dates = " – ".join(x for x in (edu.start_date, edu.end_date) if x)
            line = _with_right(degree, dates)
            if edu.gpa:
                line = f"{line} (GPA: {edu.gpa})" if line else f"GPA: {edu.gpa}"
            if line:
                flowables.append(_p(line, "body"))
            flowables.append(Spacer(1, 4))

    if data.experience:
        flowables += _section("Experience")
        for exp in data.experience:
            dates = " – ".join(x for x in (exp.start_date, exp.end_date) if x)
            flowables.append(_p(_with_right(exp.title, dates), "entry"))
            flowables.append(_p(_with_right(exp.company, exp.location), "body"))
            flowables += [_p(f"• {b}", "bullet") for b in exp.bullets if b.strip()]
            flowables.append(Spacer(1, 4))

    if data.projects:
        flowables += _section("Projects")
        for proj in data.projects:
            dates = " – ".join(x for x in (proj.start_date, proj.end_date) if x)
            header = " | ".join(x for x in (proj.name, proj.technologies) if x)
            flowables.append(_p(_with_right(header, dates), "entry"))
            flowables += [_p(f"• {b}", "bullet") for b in proj.bullets if b.strip()]
            flowables.append(Spacer(1, 4))

    skills = data.skills
    rows = [
        ("Languages", skills.languages),
        ("Frameworks", skills.frameworks),
        ("Developer Tools", skills.tools),
        ("Other", skills.other),
    ]
    if any(value for _, value in rows):
        flowables += _section("Technical Skills")
        for label, value in rows:
            if value:
                flowables.append(
                    Paragraph(f"<b>{escape(label)}:</b> {escape(value)}", STYLES["body"])
                )

    return flowables


def _text_flowables(text: str) -> list:
    flowables = []
    for line in text.splitlines():
        if line.strip():
            flowables.append(_p(line, "body"))
        else:
            flowables.append(Spacer(1, 8))
    return flowables


def _white_page(canvas, doc) -> None:
    canvas.saveState()
    canvas.setFillColor(white)
    canvas.rect(0, 0, doc.pagesize[0], doc.pagesize[1], stroke=0, fill=1)
    canvas.restoreState()


def render_resume_pdf(resume_data: dict | None = None, resume_text: str = "") -> bytes:
    """Render either variant of the resume. Returns the PDF bytes."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=LETTER,
        rightMargin=0.6 * inch, leftMargin=0.6 * inch,
        topMargin=0.5 * inch, bottomMargin=0.5 * inch,
        title="Optimized Resume",
    )

    if resume_data is not None:
        flowables = _structured_flowables(ResumeData.model_validate(resume_data))
    else:
        flowables = _text_flowables(resume_text)
    if not flowables:
        flowables = [_p("No resume content available", "body")]

    doc.build(flowables, onFirstPage=_white_page, onLaterPages=_white_page)
    pdf = buffer.getvalue()
    logger.debug("Rendered resume PDF: %d bytes", len(pdf))
    return pdf
