"""
PDF Quote Generator.

Client-facing quote document built from a published Quote snapshot.
Uses fpdf2 (pure Python, no system dependencies).

Sections:
1. Header: studio, quote number, date, client / project
2. Materials
3. Labor
4. Operations & affiliates
5. Cost summary: salaries + statutory, misc, tax, total
6. Terms

Always prints the *final* calculations (manual override included). Profit and
profit allocation are internal figures and never appear on the document.
"""

from datetime import datetime

from fpdf import FPDF

from .config import settings
from .formatting import format_currency, format_date, format_number

TAX_LABELS = {
    "VAT": "VAT",
    "TOT": "Turnover Tax",
    "NONE": "Tax",
}


def _fmt(amount) -> str:
    return format_currency(amount)


def _safe(text) -> str:
    """Replace Unicode chars that can't be rendered by built-in PDF fonts (latin-1)."""
    if not text:
        return ""
    return (
        str(text)
        .replace("•", "-")    # bullet
        .replace("—", " - ")  # em dash
        .replace("–", "-")    # en dash
        .replace("“", '"')
        .replace("”", '"')
        .replace("‘", "'")
        .replace("’", "'")
        .encode("latin-1", errors="replace")
        .decode("latin-1")
    )


class QuotePDF(FPDF):
    """Custom PDF class for studio quote documents."""

    def __init__(self):
        super().__init__()
        self.set_auto_page_break(auto=True, margin=20)

    def footer(self):
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.set_text_color(150, 150, 150)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="C")

    def section_header(self, title):
        self.set_font("Helvetica", "B", 11)
        self.set_fill_color(58, 50, 44)
        self.set_text_color(255, 255, 255)
        self.cell(0, 8, f"  {title}", fill=True, new_x="LMARGIN", new_y="NEXT")
        self.set_text_color(0, 0, 0)
        self.ln(2)

    def table_header(self, cols):
        """cols: [(label, width), ...]: numeric columns right-aligned."""
        self.set_font("Helvetica", "B", 8)
        self.set_fill_color(240, 238, 235)
        for label, width in cols:
            align = "R" if label in ("Qty", "Unit Cost", "Rate", "Hours", "Days", "Total") else "L"
            self.cell(width, 6, label, border="B", fill=True, align=align)
        self.ln()

    def table_row(self, values, widths):
        self.set_font("Helvetica", "", 8)
        for i, (val, width) in enumerate(zip(values, widths)):
            align = "L" if i == 0 else "R"
            self.cell(width, 5.5, _safe(val), align=align)
        self.ln()

    def subtotal_row(self, label, amount):
        self.set_font("Helvetica", "B", 9)
        self.cell(140, 6, label, align="R", border="T")
        self.cell(50, 6, _fmt(amount), align="R", border="T")
        self.ln(8)

    def summary_row(self, label, amount, bold=False):
        self.set_font("Helvetica", "B" if bold else "", 10)
        self.cell(130, 6, _safe(label))
        self.cell(60, 6, _fmt(amount), align="R")
        self.ln()


def generate_quote_pdf(quote: dict, client: dict = None, project: dict = None) -> bytes:
    """
    Generate a PDF for a published quote.

    Args:
        quote: Quote dict (schemas.Quote.model_dump(mode="json"))
        client: Client dict, for "Prepared for"
        project: Project dict, optional

    Returns:
        PDF bytes
    """
    form = quote.get("form_values") or {}
    calc = quote.get("calculations") or {}

    pdf = QuotePDF()
    pdf.alias_nb_pages()
    pdf.add_page()

    # ── Header ──
    pdf.set_font("Helvetica", "B", 20)
    pdf.cell(0, 10, _safe(settings.COMPANY_NAME), new_x="LMARGIN", new_y="NEXT")
    contact = " | ".join(
        p for p in [settings.COMPANY_ADDRESS, settings.COMPANY_PHONE, settings.COMPANY_EMAIL] if p
    )
    if contact:
        pdf.set_font("Helvetica", "", 9)
        pdf.set_text_color(100, 100, 100)
        pdf.cell(0, 5, _safe(contact), new_x="LMARGIN", new_y="NEXT")
        pdf.set_text_color(0, 0, 0)
    pdf.ln(4)

    try:
        date_str = format_date(quote.get("timestamp") or "")
    except ValueError:
        date_str = format_date(datetime.utcnow())

    pdf.set_font("Helvetica", "B", 14)
    pdf.cell(0, 8, f"QUOTE #{_safe(quote.get('quote_number', ''))}", new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(0, 5, f"Date: {date_str}", new_x="LMARGIN", new_y="NEXT")
    pdf.cell(0, 5, f"Valid for: {settings.QUOTE_VALID_DAYS} days", new_x="LMARGIN", new_y="NEXT")
    if client:
        pdf.ln(2)
        pdf.cell(0, 5, f"Prepared for: {_safe(client.get('name'))}", new_x="LMARGIN", new_y="NEXT")
    if project:
        pdf.cell(0, 5, f"Project: {_safe(project.get('name'))}", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(6)

    # ── Materials ──
    materials = form.get("materials") or []
    if materials:
        pdf.section_header("MATERIALS")
        cols = [("Item", 90), ("Qty", 25), ("Unit Cost", 35), ("Total", 40)]
        widths = [c[1] for c in cols]
        pdf.table_header(cols)
        for m in materials:
            qty = m.get("quantity", 0)
            unit_cost = m.get("unit_cost", 0)
            pdf.table_row(
                [m.get("name", "")[:50], format_number(qty, 2), _fmt(unit_cost), _fmt(qty * unit_cost)],
                widths,
            )
        pdf.subtotal_row("Materials Subtotal", calc.get("total_material_cost", 0))

    # ── Labor ──
    labor = form.get("labor") or []
    if labor:
        pdf.section_header("LABOR")
        cols = [("Vendor", 80), ("Hours", 25), ("Days", 20), ("Rate", 30), ("Total", 35)]
        widths = [c[1] for c in cols]
        pdf.table_header(cols)
        for item in labor:
            hourly = item.get("rate_type") == "hourly"
            units = item.get("hours", 0) if hourly else item.get("days", 0)
            rate = item.get("rate", 0)
            pdf.table_row(
                [
                    item.get("vendor", "")[:45],
                    format_number(units) if hourly else "-",
                    "-" if hourly else format_number(units),
                    f"{_fmt(rate)}/{'hr' if hourly else 'day'}",
                    _fmt(rate * units),
                ],
                widths,
            )
        pdf.subtotal_row("Labor Subtotal", calc.get("total_labor_cost", 0))

    # ── Operations & affiliates ──
    operations = form.get("operations") or []
    affiliates = form.get("affiliates") or []
    if operations or affiliates:
        pdf.section_header("OPERATIONS & PARTNERS")
        pdf.set_font("Helvetica", "", 8)
        for op in operations:
            pdf.cell(140, 5, f"  {_safe(op.get('name', ''))}")
            pdf.cell(50, 5, _fmt(op.get("cost", 0)), align="R")
            pdf.ln()
        for aff in affiliates:
            if aff.get("rate_type") == "percentage":
                label = f"  {_safe(aff.get('name', ''))} ({format_number(aff.get('rate', 0), 2)}% of base)"
            else:
                label = f"  {_safe(aff.get('name', ''))} ({format_number(aff.get('units', 0))} x {_fmt(aff.get('rate', 0))})"
            pdf.cell(190, 5, label, new_x="LMARGIN", new_y="NEXT")
        pdf.subtotal_row(
            "Operations & Partners Subtotal",
            calc.get("total_operation_cost", 0) + calc.get("total_affiliate_cost", 0),
        )

    # ── Cost summary ──
    pdf.section_header("PROJECT TOTAL")
    pdf.summary_row("Materials", calc.get("total_material_cost", 0))
    pdf.summary_row("Labor", calc.get("total_labor_cost", 0))
    pdf.summary_row("Operations", calc.get("total_operation_cost", 0))
    pdf.summary_row("Salaries", calc.get("salary_allocation", 0) + calc.get("total_gross_salary", 0))
    if calc.get("nssf_amount"):
        pdf.summary_row("NSSF", calc.get("nssf_amount", 0))
    if calc.get("shif_amount"):
        pdf.summary_row("SHIF", calc.get("shif_amount", 0))
    if calc.get("total_affiliate_cost"):
        pdf.summary_row("Partners & Referrals", calc.get("total_affiliate_cost", 0))
    if calc.get("misc_amount"):
        pdf.summary_row("Contingency", calc.get("misc_amount", 0))

    pdf.set_draw_color(200, 200, 200)
    pdf.line(pdf.l_margin, pdf.get_y(), pdf.w - pdf.r_margin, pdf.get_y())
    pdf.ln(1)
    if calc.get("tax_type") != "NONE":
        label = TAX_LABELS.get(calc.get("tax_type"), "Tax")
        pdf.summary_row(f"{label} ({format_number(calc.get('tax_rate', 0), 2)}%)", calc.get("tax_amount", 0))

    pdf.ln(1)
    pdf.set_fill_color(58, 50, 44)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font("Helvetica", "B", 13)
    pdf.cell(130, 10, "  QUOTE TOTAL", fill=True)
    pdf.cell(60, 10, f"{_fmt(calc.get('total_price', 0))}  ", fill=True, align="R")
    pdf.set_text_color(0, 0, 0)
    pdf.ln(14)

    # ── Terms ──
    pw = pdf.w - pdf.l_margin - pdf.r_margin
    pdf.set_font("Helvetica", "I", 8)
    pdf.set_text_color(100, 100, 100)
    pdf.cell(pw, 4, f"This quote is valid for {settings.QUOTE_VALID_DAYS} days from the date above.",
             new_x="LMARGIN", new_y="NEXT")
    pdf.cell(pw, 4, "Payment terms: 50% deposit, balance upon completion.", new_x="LMARGIN", new_y="NEXT")
    pdf.set_text_color(0, 0, 0)

    return bytes(pdf.output())
