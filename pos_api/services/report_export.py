import io

from openpyxl import Workbook
from openpyxl.chart import BarChart, Reference
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

CURRENCY_FORMAT = "#,##0.00"

thin = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)
header_font = Font(bold=True, color="FFFFFF")
header_fill = PatternFill("solid", fgColor="4F81BD")
center = Alignment(horizontal="center")


def _write_sheet(ws, headers, rows, currency_columns=()):
    ws.append(headers)
    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill
        cell.border = thin
        cell.alignment = center

    for r in rows:
        ws.append(r)

    for row in ws.iter_rows(min_row=2):
        for idx in currency_columns:
            row[idx].number_format = CURRENCY_FORMAT
        for cell in row:
            cell.border = thin
            cell.alignment = center


def build_date_range_workbook(report: dict) -> io.BytesIO:
    """Render a date-range sales report into an xlsx file held in memory."""
    wb = Workbook()

    # Overview
    ws = wb.active
    ws.title = "Overview"
    _write_sheet(
        ws,
        ["Metric", "Value"],
        [
            ["Start Date", report["start_date"]],
            ["End Date", report["end_date"]],
            ["Total Sales", report["total_sales"]],
            ["Total Orders", report["total_order_count"]],
        ],
    )
    ws["B4"].number_format = CURRENCY_FORMAT

    # Daily sales with a trend chart
    ws2 = wb.create_sheet("Daily Sales")
    daily = report["daily_sales"]
    _write_sheet(
        ws2,
        ["Date", "Sales", "Orders"],
        [[d["date"], d["sales"], d["orders"]] for d in daily],
        currency_columns=(1,),
    )
    if daily:
        chart = BarChart()
        chart.title = "Sales Trend"
        data_ref = Reference(ws2, min_col=2, min_row=1, max_row=len(daily) + 1)
        cats = Reference(ws2, min_col=1, min_row=2, max_row=len(daily) + 1)
        chart.add_data(data_ref, titles_from_data=True)
        chart.set_categories(cats)
        ws2.add_chart(chart, "E3")

    ws3 = wb.create_sheet("Payment Methods")
    _write_sheet(
        ws3,
        ["Method", "Name", "Orders", "Amount"],
        [[m["method"], m["name"], m["count"], m["amount"]] for m in report["payment_methods"]],
        currency_columns=(3,),
    )

    ws4 = wb.create_sheet("Categories")
    _write_sheet(
        ws4,
        ["Category", "Items Sold", "Revenue"],
        [[c["name"], c["items_sold"], c["revenue"]] for c in report["category_sales"]],
        currency_columns=(2,),
    )

    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer
