"""
PDF Generator Service for HOA Portal.

Renders stored financial statements (income statement, balance sheet,
cash flow) for board packets and owner requests.
"""

import io
from datetime import datetime
from typing import Any, Optional

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

BRAND = colors.HexColor("#1a1a2e")
RULE = colors.HexColor("#e0e0e0")
MUTED = colors.HexColor("#666666")


def format_cents(cents: Optional[int]) -> str:
    cents = cents or 0
    sign = "-" if cents < 0 else ""
    return f"{sign}${abs(cents) / 100:,.2f}"


class PDFGenerator:
    """Generates statement PDFs."""

    def __init__(self):
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        self.styles.add(ParagraphStyle(
            name="StatementTitle",
            parent=self.styles["Heading1"],
            fontSize=20,
            spaceAfter=6,
            alignment=TA_CENTER,
            textColor=BRAND,
        ))
        self.styles.add(ParagraphStyle(
            name="StatementSubtitle",
            parent=self.styles["Normal"],
            fontSize=11,
            spaceAfter=18,
            alignment=TA_CENTER,
            textColor=MUTED,
        ))
        self.styles.add(ParagraphStyle(
            name="SectionHeader",
            parent=self.styles["Heading2"],
            fontSize=13,
            spaceBefore=16,
            spaceAfter=6,
            textColor=BRAND,
        ))
        self.styles.add(ParagraphStyle(
            name="Footer",
            parent=self.styles["Normal"],
            fontSize=8,
            textColor=colors.HexColor("#888888"),
            alignment=TA_CENTER,
            spaceBefore=20,
        ))

    def _account_table(self, section: dict[str, Any], total_label: str) -> Table:
        rows = [["Code", "Account", "Amount"]]
        for account in section.get("accounts", []):
            rows.append([account.get("code", ""), account.get("name", ""), format_cents(account.get("amount_cents"))])
        rows.append(["", total_label, format_cents(section.get("total_cents"))])

        table = Table(rows, colWidths=[1 * inch, 4 * inch, 1.5 * inch])
        table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f5f5f5")),
            ("ALIGN", (2, 0), (2, -1), "RIGHT"),
            ("LINEABOVE", (0, -1), (-1, -1), 1, BRAND),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
        ]))
        return table

    def _total_line(self, label: str, cents: Optional[int]) -> Table:
        table = Table([[label, format_cents(cents)]], colWidths=[5 * inch, 1.5 * inch])
        table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (-1, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 11),
            ("ALIGN", (1, 0), (1, 0), "RIGHT"),
            ("LINEABOVE", (0, 0), (-1, 0), 1.5, BRAND),
            ("TOPPADDING", (0, 0), (-1, -1), 8),
        ]))
        return table

    def _section(self, story: list, title: str, section: dict[str, Any], total_label: str) -> None:
        story.append(Paragraph(title, self.styles["SectionHeader"]))
        story.append(HRFlowable(width="100%", thickness=1, color=RULE))
        if section.get("accounts"):
            story.append(self._account_table(section, total_label))
        else:
            story.append(Paragraph("No activity.", self.styles["Normal"]))

    def generate_financial_statement(
        self,
        statement_type: str,
        data: dict[str, Any],
        association_name: str,
    ) -> bytes:
        """Render a stored statement's data to PDF bytes."""
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=0.75 * inch,
            leftMargin=0.75 * inch,
            topMargin=0.75 * inch,
            bottomMargin=0.75 * inch,
            title=data.get("statement_name", "Financial Statement"),
        )

        story: list = []
        story.append(Paragraph(association_name, self.styles["StatementTitle"]))
        if statement_type == "balance_sheet":
            period = f"As of {data.get('period_end', '')}"
        else:
            period = f"{data.get('period_start', '')} to {data.get('period_end', '')}"
        story.append(Paragraph(
            f"{data.get('statement_name', 'Financial Statement')} | {period}",
            self.styles["StatementSubtitle"],
        ))

        if statement_type == "income":
            self._section(story, "REVENUE", data.get("revenue", {}), "Total Revenue")
            self._section(story, "EXPENSES", data.get("expenses", {}), "Total Expenses")
            story.append(Spacer(1, 0.2 * inch))
            story.append(self._total_line("Net Income", data.get("net_income_cents")))
        elif statement_type == "balance_sheet":
            self._section(story, "ASSETS", data.get("assets", {}), "Total Assets")
            self._section(story, "LIABILITIES", data.get("liabilities", {}), "Total Liabilities")
            self._section(story, "EQUITY", data.get("equity", {}), "Total Equity")
            story.append(Spacer(1, 0.2 * inch))
            story.append(self._total_line("Current Earnings", data.get("retained_earnings_cents")))
            story.append(self._total_line(
                "Total Liabilities & Equity", data.get("total_liabilities_and_equity_cents")
            ))
        else:
            operating = data.get("operating", {})
            story.append(Paragraph("OPERATING ACTIVITIES", self.styles["SectionHeader"]))
            story.append(HRFlowable(width="100%", thickness=1, color=RULE))
            story.append(self._total_line("Revenue", operating.get("revenue_cents")))
            story.append(self._total_line("Expenses", operating.get("expense_cents")))
            story.append(self._total_line("Net Operating", operating.get("total_cents")))
            self._section(story, "INVESTING ACTIVITIES", data.get("investing", {}), "Net Investing")
            self._section(story, "FINANCING ACTIVITIES", data.get("financing", {}), "Net Financing")
            story.append(Spacer(1, 0.2 * inch))
            story.append(self._total_line("Net Cash Flow", data.get("net_cash_flow_cents")))

        story.append(Spacer(1, 0.4 * inch))
        story.append(HRFlowable(width="100%", thickness=1, color=RULE))
        story.append(Paragraph(
            f"Generated by HOA Portal on {datetime.utcnow().strftime('%Y-%m-%d %H:%M UTC')}",
            self.styles["Footer"],
        ))

        doc.build(story)
        buffer.seek(0)
        return buffer.read()


def get_pdf_generator() -> PDFGenerator:
    """Get PDF generator instance."""
    return PDFGenerator()
