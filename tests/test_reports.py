"""Tests for dashboard statistics and report exports."""

import csv
import io
from datetime import timedelta
from decimal import Decimal

import pytest
from dateutil.relativedelta import relativedelta
from django.utils import timezone
from openpyxl import load_workbook

from members import reports, stats


pytestmark = pytest.mark.django_db


@pytest.fixture
def ledger(service, make_member, annual_dues, monthly_levy):
    """Two families, three members, a few payments."""
    okafor = service.add_family('Okafor').obj
    eze = service.add_family('Eze').obj

    ngozi = make_member(first_name='Ngozi', age=30, family=okafor, is_patriarch=True)
    emeka = make_member(first_name='Emeka', age=20, family=okafor)
    make_member(first_name='Obi', last_name='Eze', age=12, family=eze)

    today = service.today()
    service.record_payment(ngozi, annual_dues, Decimal('50.00'), date=today)
    service.record_payment(emeka, annual_dues, Decimal('20.00'), date=today)
    return {'okafor': okafor, 'eze': eze, 'ngozi': ngozi, 'emeka': emeka}


class TestDashboardStats:

    def test_totals(self, community, ledger, tiers):
        result = stats.get_dashboard_stats(community)

        assert result['total_members'] == 3
        assert result['total_families'] == 2
        assert result['total_contributions'] == Decimal('110.00')  # 60 + 50 + 0
        assert result['total_paid'] == Decimal('70.00')
        assert result['total_balance_formatted'] == '$40.00'
        assert result['payment_status'] == {'paid': 1, 'partial': 2, 'unpaid': 0}  # Obi owes nothing
        assert list(result['tier_breakdown'].items()) == [(tiers[0], 1), (tiers[1], 1), (tiers[2], 1)]

    def test_stale_tier_labels_listed_last(self, community, service, ledger):
        service.update_settings(tier1_age=16, tier2_age=21)

        breakdown = stats.get_dashboard_stats(community)['tier_breakdown']

        assert list(breakdown)[:3] == ['Under 18', 'Group 1 (16-20)', 'Group 2 (21+)']
        assert breakdown['Group 1 (18-24)'] == 1

    def test_family_statistics(self, community, ledger):
        rows = stats.get_family_statistics(community)

        assert [row['family'].name for row in rows] == ['Okafor', 'Eze']
        assert rows[0]['member_count'] == 2
        assert rows[0]['patriarch'] == ledger['ngozi']
        assert rows[0]['balance'] == Decimal('40.00')

    def test_member_breakdown_by_month(self, service, make_member, annual_dues, monthly_levy):
        member = make_member(age=40, join_date=timezone.now() - relativedelta(months=2))
        service.record_payment(member, monthly_levy, Decimal('10.00'), date=service.today(), month=member.join_date.month)

        rows = stats.get_member_contribution_breakdown(member, [annual_dues, monthly_levy], today=service.today())

        levy = next(row for row in rows if row['contribution'] == monthly_levy)
        assert levy['expected'] == Decimal('30.00')
        assert len(levy['months']) == 3
        assert levy['months'][0]['balance'] == Decimal('0.00')

    def test_payment_trends_fill_empty_months(self, community, ledger):
        trend = stats.get_payment_trends(community, months=3)

        assert len(trend) == 3
        assert trend[0]['total'] == Decimal('0')
        assert trend[-1]['total'] == Decimal('70.00')


class TestReportTables:

    def test_member_list_rows(self, community, ledger):
        table = reports.build_member_list(community)

        assert table.headers[0] == 'Name'
        assert [row[0] for row in table.rows] == ['Emeka Okafor', 'Ngozi Okafor', 'Obi Eze']

    def test_payment_report_respects_range(self, community, service, ledger, annual_dues):
        old = service.today() - timedelta(days=90)
        service.record_payment(ledger['emeka'], annual_dues, Decimal('5.00'), date=old)

        start, end = reports.get_default_date_range(community)
        table = reports.build_payment_report(community, start, end)

        assert len(table.rows) == 2
        assert len(reports.build_payment_report(community).rows) == 3


class TestExportResponse:
    """Tests for CSV, Excel and PDF rendering."""

    @pytest.fixture
    def table(self, community, ledger):
        return reports.build_member_list(community)

    def test_csv(self, table):
        response = reports.export_response(table, 'csv')

        assert response['Content-Type'] == 'text/csv; charset=utf-8'
        assert response['Content-Disposition'].startswith('attachment; filename="member_list_')
        rows = list(csv.reader(io.StringIO(response.content.decode())))
        assert rows[0] == table.headers
        assert rows[2][-1] == '$60.00'

    def test_xlsx_keeps_numbers(self, table):
        response = reports.export_response(table, 'xlsx')

        assert response['Content-Type'].endswith('spreadsheetml.sheet')
        sheet = load_workbook(io.BytesIO(response.content)).active
        assert sheet['A1'].value == 'Member List'
        assert sheet['F5'].value == 'Contribution (USD)'
        assert Decimal(str(sheet['F7'].value)) == Decimal('60')

    def test_pdf(self, table):
        response = reports.export_response(table, 'pdf')

        assert response['Content-Type'] == 'application/pdf'
        assert response.content.startswith(b'%PDF')

    def test_unsupported_format(self, table):
        with pytest.raises(ValueError):
            reports.export_response(table, 'docx')
