"""
Dialog windows for GroupSplit GUI
"""
from __future__ import annotations
from typing import Dict, List, Optional

try:
    import tkinter as tk
    from tkinter import ttk, messagebox
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None

from models import EXPENSE_CATEGORIES, Expense, Group
from group_ops import GroupError, build_expense, find_member, new_group, update_group_info
from utils import safe_float


class _Dialog(tk.Toplevel):
    """Modal dialog with OK/Cancel and Enter bound to OK"""

    def __init__(self, master, title: str):
        super().__init__(master)
        self.title(title)
        self.resizable(False, False)
        self.result = None

        def on_enter(event=None):
            self._ok()
            return "break"

        self.bind("<Return>", on_enter)
        self.bind("<KP_Enter>", on_enter)
        self.bind("<Escape>", lambda *_: self._cancel())

    def _buttons(self, frm, row: int, columnspan: int = 2):
        btns = ttk.Frame(frm)
        btns.grid(row=row, column=0, columnspan=columnspan, sticky="e", pady=(10, 0))
        ttk.Button(btns, text="OK", command=self._ok).grid(row=0, column=0, padx=4)
        ttk.Button(btns, text="Cancel", command=self._cancel).grid(row=0, column=1, padx=4)
        self.grab_set()
        self.transient(self.master)

    def _ok(self):
        raise NotImplementedError

    def _cancel(self):
        """Cancel and close"""
        self.result = None
        self.destroy()


class GroupDialog(_Dialog):
    """Dialog for creating or editing a group's name, date and place"""

    def __init__(self, master, existing: List[Group], group: Optional[Group] = None):
        super().__init__(master, "New Group" if group is None else "Edit Group")
        self.existing = existing
        self.group = group
        self.result: Optional[Group] = None

        frm = ttk.Frame(self, padding=10)
        frm.grid(row=0, column=0, sticky="nsew")

        self.v_name = tk.StringVar(value=group.name if group else "")
        self.v_date = tk.StringVar(value=(group.gathering_date or "") if group else "")
        self.v_location = tk.StringVar(value=(group.gathering_location or "") if group else "")

        ttk.Label(frm, text="Name").grid(row=0, column=0, sticky="w")
        ttk.Entry(frm, textvariable=self.v_name, width=28).grid(row=0, column=1, sticky="w")
        ttk.Label(frm, text="Date (YYYY-MM-DD)").grid(row=1, column=0, sticky="w", pady=2)
        ttk.Entry(frm, textvariable=self.v_date, width=18).grid(row=1, column=1, sticky="w")
        ttk.Label(frm, text="Location").grid(row=2, column=0, sticky="w", pady=2)
        ttk.Entry(frm, textvariable=self.v_location, width=28).grid(row=2, column=1, sticky="w")

        self._buttons(frm, 3)

    def _ok(self):
        try:
            if self.group is None:
                self.result = new_group(self.v_name.get(), self.existing,
                                        self.v_date.get(), self.v_location.get())
            else:
                update_group_info(self.group, self.v_name.get(), self.existing,
                                  self.v_date.get(), self.v_location.get())
                self.result = self.group
        except GroupError as ex:
            messagebox.showerror("Invalid group", str(ex), parent=self)
            return
        self.destroy()


class ExpenseDialog(_Dialog):
    """Dialog for adding/editing an expense"""

    def __init__(self, master, group: Group, expense: Optional[Expense] = None):
        super().__init__(master, "Add Expense" if expense is None else "Edit Expense")
        self.group = group
        self.expense = expense
        self.result: Optional[Expense] = None

        members = group.members
        self.payer_ids = [m.id for m in members]
        payer_names = [m.name for m in members]

        frm = ttk.Frame(self, padding=10)
        frm.grid(row=0, column=0, sticky="nsew")

        # Editing keeps the payer if still a member, otherwise the first member
        payer = find_member(group, expense.payer_id) if expense else None
        if payer is None and members:
            payer = members[0]

        self.v_desc = tk.StringVar(value=expense.description if expense else "")
        self.v_amount = tk.StringVar(value=f"{expense.amount:.2f}" if expense else "")
        self.v_payer = tk.StringVar(value=payer.name if payer else "")
        category = expense.category if expense and expense.category in EXPENSE_CATEGORIES else EXPENSE_CATEGORIES[0]
        self.v_category = tk.StringVar(value=category)

        r = 0
        ttk.Label(frm, text="Description").grid(row=r, column=0, sticky="w")
        ttk.Entry(frm, textvariable=self.v_desc, width=28).grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Amount").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Entry(frm, textvariable=self.v_amount, width=18).grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Payer").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Combobox(frm, textvariable=self.v_payer, values=payer_names,
                     width=16, state="readonly").grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Category").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Combobox(frm, textvariable=self.v_category, values=EXPENSE_CATEGORIES,
                     width=16, state="readonly").grid(row=r, column=1, sticky="w")
        r += 1

        # Participants: everyone by default when adding
        ttk.Label(frm, text="Participants").grid(row=r, column=0, sticky="nw", pady=(6, 0))
        parts = ttk.Frame(frm)
        parts.grid(row=r, column=1, sticky="w", pady=(6, 0))
        selected = set(expense.participants) if expense else set(self.payer_ids)
        self.part_vars: Dict[str, tk.BooleanVar] = {}
        for i, m in enumerate(members):
            v = tk.BooleanVar(value=m.id in selected)
            v.trace_add("write", lambda *_: self._update_share_label())
            self.part_vars[m.id] = v
            ttk.Checkbutton(parts, text=m.name, variable=v).grid(row=i, column=0, sticky="w")
        r += 1

        self.share_var = tk.StringVar(value="")
        ttk.Label(frm, textvariable=self.share_var).grid(row=r, column=0, columnspan=2, sticky="w", pady=(8, 0))
        self.v_amount.trace_add("write", lambda *_: self._update_share_label())
        self._update_share_label()
        r += 1

        self._buttons(frm, r)

    def _selected(self) -> List[str]:
        return [mid for mid, v in self.part_vars.items() if v.get()]

    def _update_share_label(self):
        """Show each participant's equal share"""
        amt = safe_float(self.v_amount.get(), 0.0)
        n = len(self._selected())
        each = amt / n if n else 0.0
        self.share_var.set(f"Each participant: {each:.2f}   ({n} selected)")

    def _ok(self):
        """Validate and save expense"""
        name = self.v_payer.get()
        payer_id = next((m.id for m in self.group.members if m.name == name), "")
        try:
            self.result = build_expense(
                self.group,
                self.v_desc.get(),
                safe_float(self.v_amount.get(), 0.0),
                payer_id,
                self._selected(),
                self.v_category.get(),
                expense_id=self.expense.id if self.expense else None,
                receipt_image=self.expense.receipt_image if self.expense else None,
            )
        except GroupError as ex:
            messagebox.showerror("Invalid expense", str(ex), parent=self)
            return
        self.destroy()
