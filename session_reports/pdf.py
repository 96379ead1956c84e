from __future__ import annotations  # Styled PDF rendering for completed interview sessions

from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from interview_session.models import Answer, InterviewSession
from question_bank.models import InterviewTemplate


DEJAVU_SANS = Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf")  # System font
DEJAVU_SANS_BOLD = Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf")  # System font

ACCENT = (45, 115, 245)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
SOFT_ACCENT_BG = (243, 248, 255)  # Highlight background


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:  # Parse ISO timestamp, None when malformed
    if not value:
        return None
    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def _format_datetime(value: Optional[str]) -> str:
    parsed = _parse_datetime(value)
    if not parsed:
        return "-"
    return parsed.strftime("%d %b %Y, %I:%M %p").lstrip("0").replace(" 0", " ")


def _score_value(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    return f"{float(value):.1f}/10"


def _effective_width(pdf: FPDF) -> float:
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


class ReportPDF(FPDF):  # PDF with banner header and paginated footer
    def __init__(self, *args, accent: Tuple[int, int, int] = ACCENT, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.accent = accent
        self.header_title = "Interview Report"
        self.font_regular = "Helvetica"
        self.font_bold = "Helvetica"
        self.supports_unicode = False

    def use_system_fonts(self) -> None:  # Switch to DejaVu when installed
        if not (DEJAVU_SANS.exists() and DEJAVU_SANS_BOLD.exists()):
            return
        self.add_font("DejaVu", "", str(DEJAVU_SANS))
        self.add_font("DejaVu", "B", str(DEJAVU_SANS_BOLD))
        self.font_regular = "DejaVu"
        self.font_bold = "DejaVu"
        self.supports_unicode = True

    def clean(self, value: object) -> str:  # Core fonts only cover latin-1
        text = "" if value is None else str(value)
        if self.supports_unicode:
            return text
        text = text.replace("•", "-").replace("’", "'").replace("—", "-")
        return text.encode("latin-1", "ignore").decode("latin-1")

    def line_block(self, text: str, *, size: int = 11, bold: bool = False, color=TEXT, height: float = 6) -> None:
        self.set_x(self.l_margin)
        self.set_text_color(*color)
        self.set_font(self.font_bold if bold else self.font_regular, "B" if bold else "", size)
        self.multi_cell(_effective_width(self), height, self.clean(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def header(self) -> None:  # Render header banner
        usable = _effective_width(self)
        title = self.clean(self.header_title)
        if self.page_no() == 1:
            line_height = 8
            self.set_font(self.font_bold, "B", 16)
            lines = self.multi_cell(usable, line_height, title, dry_run=True, output="LINES")
            banner = 6 + max(1, len(lines)) * line_height + 4
            self.set_fill_color(*self.accent)
            self.rect(0, 0, self.w, banner, style="F")
            self.set_text_color(255, 255, 255)
            self.set_xy(self.l_margin, 6)
            self.multi_cell(usable, line_height, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        else:
            self.set_text_color(80, 80, 80)
            self.set_xy(self.l_margin, 8)
            self.set_font(self.font_bold, "B", 12)
            self.multi_cell(usable, 6, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
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


def _section_title(pdf: ReportPDF, title: str) -> None:
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf.font_bold, "B", 13)
    pdf.cell(0, 9, pdf.clean(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _meta_block(pdf: ReportPDF, rows: List[Tuple[str, str]]) -> None:  # Two-column label/value grid
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
        pdf.set_text_color(*TEXT)
        pdf.set_font(pdf.font_bold, "B", 11)
        pdf.cell(col, line, pdf.clean(left[1]), new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, pdf.clean(right[1]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _score_banner(pdf: ReportPDF, score: Optional[float]) -> None:
    top = pdf.get_y()
    width = _effective_width(pdf)
    pdf.set_fill_color(*SOFT_ACCENT_BG)
    pdf.rect(pdf.l_margin, top, width, 16, style="F")
    pdf.set_xy(pdf.l_margin + 6, top + 4)
    pdf.set_text_color(*MUTED)
    pdf.set_font(pdf.font_regular, "", 10)
    pdf.cell(width - 12, 8, "Overall Score")
    pdf.set_xy(pdf.l_margin, top + 4)
    pdf.set_text_color(*ACCENT)
    pdf.set_font(pdf.font_bold, "B", 14)
    pdf.cell(width - 6, 8, _score_value(score), align="R")
    pdf.set_y(top + 20)
    pdf.set_text_color(*TEXT)


def _bullets(pdf: ReportPDF, items: Sequence[str]) -> None:
    if not items:
        pdf.line_block("None recorded.", size=10, color=MUTED)
        return
    for item in items:
        pdf.line_block(f"• {item}", size=10)


def _render_answer(pdf: ReportPDF, number: int, question: str, answer: Answer) -> None:
    pdf.line_block(f"Q{number}. {question}", bold=True)
    pdf.line_block(f"Score: {_score_value(answer.score)}", size=10, color=ACCENT)
    pdf.line_block(f"Answer: {answer.answer_text or '-'}", size=10)
    if answer.feedback:
        pdf.line_block(f"Feedback: {answer.feedback}", size=10, color=MUTED)
    if answer.strengths:
        pdf.line_block("Strengths: " + "; ".join(answer.strengths), size=10)
    if answer.weaknesses:
        pdf.line_block("Weaknesses: " + "; ".join(answer.weaknesses), size=10)
    for follow_up in answer.follow_ups:
        pdf.line_block(f"Suggested follow-up: {follow_up.question}", size=10, color=MUTED)
    pdf.ln(3)


def generate_session_report_pdf(  # Build PDF payload for a completed session
    template: InterviewTemplate,
    session: InterviewSession,
    answers: Sequence[Answer],
) -> bytes:
    pdf = ReportPDF()
    pdf.use_system_fonts()
    pdf.alias_nb_pages()
    pdf.header_title = f"{template.title} - {template.job_role} - Interview Report"
    pdf.set_margins(15, 22, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    _section_title(pdf, "Session Overview")
    _meta_block(
        pdf,
        [
            ("Session ID", session.session_id),
            ("Student ID", session.student_id),
            ("Role", template.job_role),
            ("Status", session.status.value),
            ("Started", _format_datetime(session.started_at)),
            ("Completed", _format_datetime(session.completed_at)),
        ],
    )

    report = session.final_report
    _score_banner(pdf, report.overall_score if report else session.overall_score)

    if report is not None:
        _section_title(pdf, "Summary")
        pdf.line_block(report.summary or "-")
        pdf.ln(2)
        if report.detailed_feedback:
            _section_title(pdf, "Detailed Feedback")
            pdf.line_block(report.detailed_feedback)
            pdf.ln(2)
        _section_title(pdf, "Recommendations")
        _bullets(pdf, report.recommendations)
        pdf.ln(2)

    _section_title(pdf, "Answers")
    questions = template.question_index()
    if not answers:
        pdf.line_block("No answers were recorded.", size=10, color=MUTED)
    for number, answer in enumerate(answers, start=1):
        question = questions.get(answer.question_id)
        _render_answer(pdf, number, question.text if question else answer.question_id, answer)

    return bytes(pdf.output())


__all__ = ["ReportPDF", "generate_session_report_pdf"]
