from __future__ import annotations  # Styled PDF rendering for exported interview sessions

import os
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos


DEJAVU_SANS = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"  # System font
DEJAVU_SANS_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"  # System font

ACCENT = (45, 115, 245)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
SOFT_ACCENT_BG = (243, 248, 255)  # Highlight background
ROW_BG = (248, 249, 255)


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:  # Parse ISO timestamp from the export payload
    if not value:
        return None
    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def _format_datetime(value: Optional[datetime]) -> str:  # Format timestamp for display
    if not value:
        return "-"
    return value.strftime("%d %b %Y, %I:%M %p").lstrip("0").replace(" 0", " ")


def _effective_width(pdf: FPDF) -> float:  # Compute effective page width
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


def _score_value(value: Any) -> str:
    if value is None:
        return "N/A"
    return f"{float(value):g}/10"


class SessionPDF(FPDF):  # PDF with custom header/footer styling
    def __init__(self, *args, accent: Tuple[int, int, int] = ACCENT, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.accent = accent
        self.header_title = "Interview Report"
        self.font_regular = "Helvetica"
        self.font_bold = "Helvetica"
        self.supports_unicode = False

    def use_system_fonts(self) -> None:  # Switch to DejaVu when the system ships it
        if not (os.path.exists(DEJAVU_SANS) and os.path.exists(DEJAVU_SANS_BOLD)):
            return
        self.add_font("DejaVu", "", DEJAVU_SANS)
        self.add_font("DejaVu", "B", DEJAVU_SANS_BOLD)
        self.font_regular = "DejaVu"
        self.font_bold = "DejaVu"
        self.supports_unicode = True

    def clean(self, text: Any) -> str:  # Drop characters the core fonts cannot encode
        value = "" if text is None else str(text)
        if self.supports_unicode:
            return value
        return value.replace("•", "-").replace("…", "...").encode("latin-1", "ignore").decode("latin-1")

    @property
    def bullet(self) -> str:
        return "•" if self.supports_unicode else "-"

    def header(self) -> None:  # Render header banner
        usable = _effective_width(self)
        if self.page_no() == 1:
            self.set_font(self.font_bold, "B", 16)
            lines = self.multi_cell(usable, 8, self.clean(self.header_title), dry_run=True, output="LINES")
            banner = 6 + len(lines) * 8 + 4
            self.set_fill_color(*self.accent)
            self.rect(0, 0, self.w, banner, style="F")
            self.set_text_color(255, 255, 255)
            self.set_xy(self.l_margin, 6)
            self.multi_cell(usable, 8, self.clean(self.header_title))
            self.set_text_color(*TEXT)
            self.ln(4)
        else:
            self.set_text_color(80, 80, 80)
            self.set_xy(self.l_margin, 8)
            self.set_font(self.font_bold, "B", 12)
            self.multi_cell(usable, 6, self.clean(self.header_title))
            mark = self.get_y()
            self.set_draw_color(*self.accent)
            self.set_line_width(0.4)
            self.line(self.l_margin, mark + 1, self.w - self.r_margin, mark + 1)
            self.set_text_color(*TEXT)
            self.ln(4)

    def footer(self) -> None:  # Render footer with pagination
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font(self.font_regular, "", 9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _section_title(pdf: SessionPDF, title: str) -> None:  # Render styled section title
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf.font_bold, "B", 13)
    pdf.cell(0, 9, pdf.clean(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _meta_block(pdf: SessionPDF, rows: List[Tuple[str, str]]) -> None:  # Draw two-column metadata
    col = _effective_width(pdf) / 2.0
    line = 6
    for idx in range(0, len(rows), 2):
        left = rows[idx]
        right = rows[idx + 1] if idx + 1 < len(rows) else ("", "")
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf.font_regular, "", 10)
        pdf.cell(col, line, pdf.clean(left[0]), new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, pdf.clean(right[0]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*TEXT)
        pdf.set_font(pdf.font_bold, "B", 11)
        pdf.cell(col, line, pdf.clean(left[1]), new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, pdf.clean(right[1]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _paragraph(pdf: SessionPDF, text: str, *, size: int = 11, color: Tuple[int, int, int] = TEXT) -> None:
    pdf.set_x(pdf.l_margin)
    pdf.set_text_color(*color)
    pdf.set_font(pdf.font_regular, "", size)
    pdf.multi_cell(_effective_width(pdf), 6, pdf.clean(text))
    pdf.set_text_color(*TEXT)


def _bullets(pdf: SessionPDF, label: str, items: Sequence[str]) -> None:
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf.font_bold, "B", 11)
    pdf.cell(0, 7, pdf.clean(label), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    if not items:
        _paragraph(pdf, "None recorded.", size=10, color=MUTED)
        return
    for item in items:
        _paragraph(pdf, f"{pdf.bullet} {item}", size=10)
    pdf.ln(1)


def _render_report(pdf: SessionPDF, export: Mapping[str, Any]) -> None:  # Final report narrative and skill table
    report = export.get("report")
    if not report:
        _paragraph(pdf, "The final report has not been generated for this interview.", color=MUTED)
        pdf.ln(2)
        return
    pdf.set_fill_color(*SOFT_ACCENT_BG)
    top = pdf.get_y()
    pdf.rect(pdf.l_margin, top, _effective_width(pdf), 16, style="F")
    pdf.set_xy(pdf.l_margin + 6, top + 4)
    pdf.set_text_color(*MUTED)
    pdf.set_font(pdf.font_regular, "", 10)
    pdf.cell(_effective_width(pdf) - 12, 6, "Overall Performance")
    pdf.set_xy(pdf.l_margin, top + 2)
    pdf.set_text_color(*ACCENT)
    pdf.set_font(pdf.font_bold, "B", 14)
    pdf.cell(_effective_width(pdf) - 6, 8, _score_value(report.get("overall_performance")), align="R")
    pdf.set_y(top + 20)
    pdf.set_text_color(*TEXT)

    _paragraph(pdf, report.get("summary", ""))
    pdf.ln(2)
    _bullets(pdf, "Strengths", report.get("strengths", []))
    _bullets(pdf, "Areas to Improve", report.get("weak_areas", []))
    _bullets(pdf, "Recommendations", report.get("recommendations", []))

    skills: Dict[str, Any] = report.get("skill_scores") or {}
    if not skills:
        return
    width = _effective_width(pdf)
    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(*ACCENT)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font(pdf.font_bold, "B", 10)
    pdf.cell(width * 0.7, 8, "Skill", fill=True)
    pdf.cell(width * 0.3, 8, "Average Score", fill=True, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_text_color(*TEXT)
    pdf.set_font(pdf.font_regular, "", 10)
    for idx, (skill, score) in enumerate(skills.items()):
        fill = idx % 2 == 0
        if fill:
            pdf.set_fill_color(247, 250, 255)
        pdf.set_x(pdf.l_margin)
        pdf.cell(width * 0.7, 7, pdf.clean(skill), fill=fill)
        pdf.cell(width * 0.3, 7, _score_value(score), fill=fill, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(3)


def _question_lines(entry: Mapping[str, Any]) -> List[str]:  # Highlight lines shown under each answer
    evaluation = entry.get("evaluation") or {}
    lines = [
        f"Category: {entry.get('category', '-')} | Skill: {entry.get('skill', '-')} | Difficulty: {entry.get('difficulty', '-')}",
        f"Score: {_score_value(evaluation.get('overall_score'))} | Time spent: {entry.get('time_spent_seconds', 0)}s",
    ]
    notes = (evaluation.get("notes") or "").strip()
    if notes:
        lines.append(f"Notes: {notes}")
    for weakness in evaluation.get("weaknesses") or []:
        lines.append(f"Weakness: {weakness}")
    feedback = entry.get("feedback") or {}
    if feedback.get("ideal_answer"):
        lines.append(f"Ideal answer: {feedback['ideal_answer']}")
    for tip in feedback.get("improvement_tips") or []:
        lines.append(f"Tip: {tip}")
    return lines


def _render_questions(pdf: SessionPDF, questions: Sequence[Mapping[str, Any]]) -> None:
    if not questions:
        _paragraph(pdf, "No answers recorded for this interview.", size=10, color=MUTED)
        pdf.ln(2)
        return
    width = _effective_width(pdf)
    line = 5.5
    for entry in questions:
        question = pdf.clean(f"Q{entry.get('number')}: {(entry.get('question') or '-').strip()}")
        answer = pdf.clean(f"A: {(entry.get('answer') or '-').strip()}")
        details = [pdf.clean(f"{pdf.bullet} {item}") for item in _question_lines(entry)]
        pdf.set_font(pdf.font_regular, "", 10)
        height = line * (
            len(pdf.multi_cell(width - 4, line, question, dry_run=True, output="LINES"))
            + len(pdf.multi_cell(width - 4, line, answer, dry_run=True, output="LINES"))
            + sum(len(pdf.multi_cell(width - 4, line, item, dry_run=True, output="LINES")) for item in details)
        )
        block = height + 6
        if pdf.get_y() + block > pdf.page_break_trigger:
            pdf.add_page()
        origin_y = pdf.get_y()
        pdf.set_fill_color(*ROW_BG)
        pdf.rect(pdf.l_margin, origin_y, width, block, style="F")
        pdf.set_xy(pdf.l_margin + 2, origin_y + 2)
        pdf.set_text_color(*ACCENT)
        pdf.set_font(pdf.font_bold, "B", 10)
        pdf.multi_cell(width - 4, line, question)
        pdf.set_x(pdf.l_margin + 2)
        pdf.set_text_color(60, 60, 60)
        pdf.set_font(pdf.font_regular, "", 10)
        pdf.multi_cell(width - 4, line, answer)
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf.font_regular, "", 9)
        for item in details:
            pdf.set_x(pdf.l_margin + 2)
            pdf.multi_cell(width - 4, line, item)
        bottom = max(pdf.get_y(), origin_y + block - 2)
        pdf.set_draw_color(*RULE)
        pdf.set_line_width(0.2)
        pdf.line(pdf.l_margin, bottom + 1, pdf.l_margin + width, bottom + 1)
        pdf.set_y(bottom + 4)
        pdf.set_text_color(*TEXT)


def generate_session_pdf(export: Mapping[str, Any]) -> bytes:  # Build PDF payload from an export document
    pdf = SessionPDF()
    pdf.use_system_fonts()
    pdf.alias_nb_pages()
    pdf.header_title = f"{export.get('role') or 'Interview'} - Interview Report"
    pdf.set_margins(15, 22, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    categories = list(export.get("categories") or [])
    if export.get("custom_category") and "custom" in categories:
        categories[categories.index("custom")] = f"custom ({export['custom_category']})"

    _section_title(pdf, "Interview Overview")
    _meta_block(
        pdf,
        [
            ("Interview ID", str(export.get("interview_id", "-"))),
            ("Status", str(export.get("status", "-")).replace("_", " ").title()),
            ("Difficulty", str(export.get("difficulty", "-")).title()),
            ("Categories", ", ".join(categories) or "-"),
            ("Started", _format_datetime(_parse_datetime(export.get("started_at")))),
            ("Completed", _format_datetime(_parse_datetime(export.get("completed_at")))),
            ("Total Time", str(export.get("total_time_formatted", "-"))),
            ("Pauses", str(export.get("pause_count", 0))),
            ("Answered", f"{export.get('total_questions', 0)} of {export.get('planned_questions', 0)}"),
            ("Bookmarks", str(len(export.get("bookmarks") or []))),
        ],
    )

    _section_title(pdf, "Final Report")
    _render_report(pdf, export)

    _section_title(pdf, "Questions & Answers")
    _render_questions(pdf, export.get("questions") or [])

    bookmarks = export.get("bookmarks") or []
    if bookmarks:
        _section_title(pdf, "Bookmarked Questions")
        for item in bookmarks:
            note = f" ({item['note']})" if item.get("note") else ""
            _paragraph(pdf, f"{pdf.bullet} Q{item.get('question_number')}: {item.get('question', '')}{note}", size=10)

    return bytes(pdf.output())


__all__ = ["SessionPDF", "generate_session_pdf"]
