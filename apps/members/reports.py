# members/reports.py

"""
Member list and payment report exports.

Each report is built once as a ReportTable (raw values) and rendered to PDF
with reportlab, to Excel with openpyxl or to CSV. Money columns stay numeric
in Excel and are formatted with the community currency elsewhere.
"""

import csv
from collections import namedtuple
from datetime import datetime
from io import BytesIO, StringIO

from django.http import HttpResponse
from django.utils.html import escape
from django.utils.text import slugify
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
import pycountry
import logging

from core.utils import format_money, get_community_today

logger = logging.getLogger(__name__)

REPORT_TYPES = (
    ('member-list', 'Member List'),
    ('payment-report', 'Payment Report'),
)

FORMATS = ('pdf', 'csv', 'xlsx')

PRIMARY_COLOR = '4F46E5'

ReportTable = namedtuple('ReportTable', 'title subtitle headers rows money_columns currency currency_code')


# =============================================================================
# REPORT DATA
# =============================================================================

def get_default_date_range(community):
    """From the first day of the current month to today"""
    today = get_community_today(community)
    return today.replace(day=1), today


def build_member_list(community, members=None):
    from .streams import load_members

    members = members if members is not None else load_members(community.pk)
    rows = [
        [
            member.name,
            member.family_name,
            member.tier,
            member.email,
            f"{member.phone_country_code or ''} {member.phone or ''}".strip() if member.phone else '',
            member.contribution,
        ]
        for member in members
    ]
    return ReportTable(
        title='Member List',
        subtitle=f"{community.name} · {len(rows)} member(s)",
        headers=['Name', 'Family', 'Age Group', 'Email', 'Phone', 'Contribution'],
        rows=rows,
        money_columns={5},
        currency=community.currency,
        currency_code=community.currency_code,
    )


def build_payment_report(community, start_date=None, end_date=None):
    from .models import Payment

    payments = (
        Payment.objects.for_community(community)
        .in_range(start_date, end_date)
        .select_related('member__family', 'contribution')
        .order_by('date', 'created_at')
    )
    rows = [
        [
            payment.member.name,
            payment.member.family_name,
            payment.contribution_name,
            payment.date,
            payment.amount,
        ]
        for payment in payments
    ]

    period = ' to '.join(d.strftime('%B %d, %Y') for d in (start_date, end_date) if d) or 'All time'
    return ReportTable(
        title='Payment Report',
        subtitle=f"{community.name} · {period}",
        headers=['Member Name', 'Family', 'Contribution', 'Payment Date', 'Amount'],
        rows=rows,
        money_columns={4},
        currency=community.currency,
        currency_code=community.currency_code,
    )


def _display_value(table, index, value, currency=None):
    if index in table.money_columns:
        return format_money(value, table.currency if currency is None else currency)
    if hasattr(value, 'strftime'):
        return value.strftime('%B %d, %Y')
    return '' if value is None else str(value)


# =============================================================================
# RENDERERS
# =============================================================================

def render_csv(table):
    buffer = StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL)
    writer.writerow(table.headers)
    for row in table.rows:
        writer.writerow([_display_value(table, index, value) for index, value in enumerate(row)])
    return buffer.getvalue()


def _currency_label(code):
    currency = pycountry.currencies.get(alpha_3=code or '')
    return f"{currency.name} ({currency.alpha_3})" if currency else (code or '')


def render_excel(table):
    wb = Workbook()
    ws = wb.active
    ws.title = table.title[:31]

    header_fill = PatternFill(start_color=PRIMARY_COLOR, end_color=PRIMARY_COLOR, fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF", size=12)

    ws.append([table.title])
    ws['A1'].font = Font(bold=True, size=14)
    ws.append([table.subtitle])
    ws.append([f"Amounts in {_currency_label(table.currency_code)}"])
    ws.append([])

    headers = [
        f"{header} ({table.currency_code})" if index in table.money_columns and table.currency_code else header
        for index, header in enumerate(table.headers)
    ]
    ws.append(headers)
    header_row = ws.max_row
    for cell in ws[header_row]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal='center')

    for row in table.rows:
        ws.append(row)
        for index in table.money_columns:
            ws.cell(row=ws.max_row, column=index + 1).number_format = '#,##0.00'

    for column_cells in ws.iter_cols(min_row=header_row):
        width = max(len(str(cell.value or '')) for cell in column_cells)
        ws.column_dimensions[column_cells[0].column_letter].width = min(max(width + 2, 10), 50)

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def render_pdf(table):
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=30,
        leftMargin=30,
        topMargin=30,
        bottomMargin=18,
        title=table.title,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'ReportTitle',
        parent=styles['Heading1'],
        fontSize=20,
        textColor=colors.HexColor(f'#{PRIMARY_COLOR}'),
        spaceAfter=8,
        alignment=TA_CENTER,
    )
    subtitle_style = ParagraphStyle(
        'ReportSubtitle',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.grey,
        spaceAfter=16,
        alignment=TA_CENTER,
    )

    elements = [
        Paragraph(escape(table.title), title_style),
        Paragraph(
            f"{escape(table.subtitle)} | Generated on: {datetime.now().strftime('%Y-%m-%d %H:%M')}",
            subtitle_style
        ),
        Spacer(1, 0.1 * inch),
    ]

    # Base-14 fonts lack most currency symbols; use the ISO code
    pdf_currency = f"{table.currency_code} " if table.currency_code else table.currency
    data = [list(table.headers)]
    for row in table.rows:
        data.append([_display_value(table, index, value, pdf_currency)[:40] for index, value in enumerate(row)])

    pdf_table = Table(data, repeatRows=1)
    style = [
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor(f'#{PRIMARY_COLOR}')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 9),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 10),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 1), (-1, -1), 8),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#F5F5F5')]),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
    ]
    for index in table.money_columns:
        style.append(('ALIGN', (index, 1), (index, -1), 'RIGHT'))
    pdf_table.setStyle(TableStyle(style))

    elements.append(pdf_table)
    elements.append(Spacer(1, 0.2 * inch))
    elements.append(Paragraph(f"<b>Rows:</b> {len(table.rows)}", styles['Normal']))

    doc.build(elements)
    return buffer.getvalue()


# =============================================================================
# HTTP RESPONSE
# =============================================================================

CONTENT_TYPES = {
    'pdf': 'application/pdf',
    'csv': 'text/csv; charset=utf-8',
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
}

RENDERERS = {
    'pdf': render_pdf,
    'csv': render_csv,
    'xlsx': render_excel,
}


def export_response(table, export_format):
    """Render `table` as a download in `export_format` (pdf, csv or xlsx)"""
    if export_format not in RENDERERS:
        raise ValueError(f"Unsupported report format: {export_format}")

    content = RENDERERS[export_format](table)
    response = HttpResponse(content, content_type=CONTENT_TYPES[export_format])
    filename = f"{slugify(table.title).replace('-', '_')}_{datetime.now().strftime('%Y-%m-%d')}.{export_format}"
    response['Content-Disposition'] = f'attachment; filename="{filename}"'

    logger.info(f"Exported {table.title} ({len(table.rows)} rows) as {export_format}")
    return response
