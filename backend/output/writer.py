"""
PDF Report Writer Module
Generates a formatted PDF summary of extracted transactions, grouped by category.
"""

import logging
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from xml.sax.saxutils import escape
from typing import Optional
from reportlab.lib.pagesizes import letter
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.enums import TA_CENTER
from extractors.categorizer import CATEGORIES
from extractors.statement_parser import Transaction

logger = logging.getLogger(__name__)

HEADER_COLOR = colors.HexColor('#ef8145')
GRID_COLOR = colors.HexColor('#808183')
STRIPE_COLOR = colors.HexColor('#e8e0dc')


class PDFReportWriter:
    """Generates PDF reports from transaction data."""

    def __init__(self, output_path: str, page_size=letter):
        """
        Initialize PDF writer.

        Args:
            output_path: Path where PDF will be saved
            page_size: Page size (default: letter)
        """
        self.output_path = output_path
        self.page_size = page_size
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        """Setup custom paragraph styles."""
        self.styles.add(ParagraphStyle(
            name='CustomTitle',
            parent=self.styles['Heading1'],
            fontSize=24,
            textColor=colors.HexColor('#1a1a1a'),
            spaceAfter=30,
            alignment=TA_CENTER,
            fontName='Helvetica-Bold'
        ))

        self.styles.add(ParagraphStyle(
            name='SectionHeading',
            parent=self.styles['Heading2'],
            fontSize=16,
            textColor=colors.HexColor('#2c5aa0'),
            spaceAfter=12,
            spaceBefore=20,
            fontName='Helvetica-Bold'
        ))

        self.styles.add(ParagraphStyle(
            name='InfoText',
            parent=self.styles['Normal'],
            fontSize=11,
            textColor=colors.HexColor('#444444'),
            spaceAfter=6
        ))

    def generate_report(self, transactions: list[Transaction], owner_id: Optional[str] = None):
        """
        Generate PDF report of transactions grouped by category.

        Args:
            transactions: Extracted transactions, in statement order
            owner_id: Owner shown in the report header

        Raises:
            ValueError: If transactions is not a list
            OSError: If the PDF cannot be written
        """
        if transactions is None or not isinstance(transactions, list):
            logger.error("transactions must be a list")
            raise ValueError("transactions must be a list")

        logger.info(f"Generating PDF report: {self.output_path} ({len(transactions)} transactions)")

        output_path = Path(self.output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        doc = SimpleDocTemplate(
            str(output_path),
            pagesize=self.page_size,
            rightMargin=0.75*inch,
            leftMargin=0.75*inch,
            topMargin=0.75*inch,
            bottomMargin=0.75*inch
        )

        story = self._create_header(owner_id, len(transactions))

        if not transactions:
            logger.warning("No transactions to include in report")
            story.append(Paragraph("No transactions were extracted from this statement.", self.styles['InfoText']))
        else:
            for category, category_txns in group_by_category(transactions).items():
                logger.debug(f"Adding section for {category} with {len(category_txns)} transactions")
                story.extend(self._create_category_section(category, category_txns))

            story.append(Spacer(1, 0.2 * inch))
            story.append(self._create_totals_table(transactions))

        try:
            doc.build(story)
        except PermissionError as e:
            logger.error(f"Permission denied writing to {self.output_path}: {e}")
            raise
        logger.info(f"PDF report generated successfully: {self.output_path}")

    def _create_header(self, owner_id: Optional[str], total_transactions: int) -> list:
        """Create report header section."""
        elements = [
            Paragraph("Bank Statement Transaction Report", self.styles['CustomTitle']),
            Spacer(1, 0.2 * inch)
        ]

        info_lines = [
            f"<b>Generated:</b> {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            f"<b>Total Transactions:</b> {total_transactions}"
        ]
        if owner_id:
            info_lines.insert(0, f"<b>Owner:</b> {escape(str(owner_id))}")

        for line in info_lines:
            elements.append(Paragraph(line, self.styles['InfoText']))

        elements.append(Spacer(1, 0.3 * inch))
        return elements

    def _create_category_section(self, category: str, transactions: list[Transaction]) -> list:
        """Heading plus transaction table for one category."""
        return [
            Paragraph(escape(category), self.styles['SectionHeading']),
            self._create_transaction_table(transactions),
            Spacer(1, 0.2 * inch)
        ]

    def _create_transaction_table(self, transactions: list[Transaction]) -> Table:
        """
        Create table of transactions with a signed total row.

        Args:
            transactions: Transactions of a single category

        Returns:
            reportlab Table object
        """
        data = [['Date', 'Description', 'Amount']]

        for txn in transactions:
            data.append([
                txn.date,
                self._truncate_description(txn.description or '[No description]', max_length=60),
                txn.amount_display
            ])

        total = signed_total(transactions)
        data.append(['', 'TOTAL', f"+{total:.2f}" if total >= 0 else f"{total:.2f}"])

        table = Table(data, colWidths=[1.2 * inch, 4.5 * inch, 1.2 * inch])
        table.setStyle(TableStyle([
            # Column header row
            ('BACKGROUND', (0, 0), (-1, 0), HEADER_COLOR),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, 0), 12),
            ('TOPPADDING', (0, 0), (-1, 0), 8),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 8),

            # Data rows
            ('ALIGN', (0, 1), (0, -2), 'CENTER'),
            ('ALIGN', (1, 1), (1, -2), 'LEFT'),
            ('ALIGN', (2, 1), (2, -1), 'RIGHT'),
            ('FONTNAME', (0, 1), (-1, -2), 'Helvetica'),
            ('FONTSIZE', (0, 1), (-1, -2), 10),

            # Total row
            ('BACKGROUND', (0, -1), (-1, -1), HEADER_COLOR),
            ('ALIGN', (1, -1), (1, -1), 'RIGHT'),
            ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
            ('LINEABOVE', (0, -1), (-1, -1), 2, colors.black),

            ('GRID', (0, 0), (-1, -1), 1, GRID_COLOR),

            *[('BACKGROUND', (0, i), (-1, i), STRIPE_COLOR)
              for i in range(2, len(data) - 1, 2)]
        ]))

        return table

    def _create_totals_table(self, transactions: list[Transaction]) -> Table:
        """Income, expense and net totals across all transactions."""
        total_income = sum(t.amount for t in transactions if not t.is_expense)
        total_expenses = sum(t.amount for t in transactions if t.is_expense)
        net_total = total_income - total_expenses

        data = [
            ['Total Income', 'Total Expenses', 'Net Amount'],
            [
                f"+{total_income:.2f}",
                f"-{total_expenses:.2f}",
                f"+{net_total:.2f}" if net_total >= 0 else f"{net_total:.2f}"
            ]
        ]

        table = Table(data, colWidths=[2.3 * inch, 2.3 * inch, 2.3 * inch])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, -1), HEADER_COLOR),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('FONTNAME', (0, 0), (-1, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 12),
            ('TOPPADDING', (0, 0), (-1, -1), 8),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
            ('GRID', (0, 0), (-1, -1), 1, GRID_COLOR)
        ]))

        return table

    @staticmethod
    def _truncate_description(description: str, max_length: int = 60) -> str:
        """Truncate description with an ellipsis if too long."""
        if len(description) <= max_length:
            return description
        return description[:max_length - 3] + "..."


def group_by_category(transactions: list[Transaction]) -> dict[str, list[Transaction]]:
    """
    Group transactions by category in the canonical category order.

    Categories outside the known set (e.g. placeholders) are listed last.
    """
    grouped = defaultdict(list)
    for txn in transactions:
        grouped[txn.category].append(txn)

    order = {category: index for index, category in enumerate(CATEGORIES)}
    return dict(sorted(grouped.items(), key=lambda item: (order.get(item[0], len(order)), item[0])))


def signed_total(transactions: list[Transaction]) -> float:
    """Sum of amounts with expenses counted negative."""
    return sum(-t.amount if t.is_expense else t.amount for t in transactions)


def generate_pdf_report(output_path: str, transactions: list[Transaction], owner_id: Optional[str] = None):
    """
    Convenience function to generate the transaction PDF report.

    Args:
        output_path: Path where PDF will be saved
        transactions: Extracted transactions
        owner_id: Owner shown in the report header
    """
    writer = PDFReportWriter(output_path)
    writer.generate_report(transactions, owner_id)
