"""
Excel export functionality for GroupSplit
"""
from __future__ import annotations
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from models import Group
from computations import individual_share, settle_group, spending_by_category, paid_by_member
from group_ops import participant_names, payer_name

logger = logging.getLogger(__name__)


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="8BD3DD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            if cell.value is None:
                continue
            max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _money_format(ws, *cols):
    for r in range(2, ws.max_row + 1):
        for c in cols:
            ws.cell(r, c).number_format = "0.00"


def export_group_excel(group: Group, filepath: str) -> None:
    """
    Export a group report with sheets:
    - Expenses
    - Balances (paid, owed, balance, paid flag)
    - Transfers
    - Categories
    """
    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)

    totals, transactions = settle_group(group)
    paid = paid_by_member(group)

    # Expenses
    ws = wb.create_sheet("Expenses")
    ws.append(["Description", "Category", "Payer", "Amount", "Participants", "Share"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for e in group.expenses:
        each = individual_share(e)
        ws.append([e.description, e.category, payer_name(group, e), e.amount,
                   ", ".join(participant_names(group, e)), each])
    if group.expenses:
        last = ws.max_row
        ws.append(["TOTAL", "", "", f"=SUM(D2:D{last})", "", ""])
        ws.cell(ws.max_row, 1).font = Font(bold=True)
    _money_format(ws, 4, 6)
    _autosize_columns(ws)

    # Balances
    ws = wb.create_sheet("Balances")
    ws.append(["Member", "Paid", "Owed", "Balance", "Has paid"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for m in group.members:
        bal = totals.balances.get(m.id, 0.0)
        ws.append([m.name, paid[m.id], paid[m.id] - bal, bal, "yes" if m.has_paid else "no"])
    ws.append([])
    ws.append(["Total spent", totals.total_spent])
    ws.append(["Each should pay", totals.each_should_pay])
    _money_format(ws, 2, 3, 4)
    _autosize_columns(ws)

    # Transfers
    ws = wb.create_sheet("Transfers")
    ws.append(["From (Debtor)", "To (Creditor)", "Amount"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for t in transactions:
        ws.append([t.from_member.name, t.to_member.name, t.amount])
    _money_format(ws, 3)
    _autosize_columns(ws)

    # Categories
    ws = wb.create_sheet("Categories")
    ws.append(["Category", "Amount"])
    _style_header(ws, 1)
    for cat, amt in spending_by_category(group).items():
        ws.append([cat, amt])
    _money_format(ws, 2)
    _autosize_columns(ws)

    wb.save(filepath)
    logger.info("exported group %s to %s", group.name, filepath)
