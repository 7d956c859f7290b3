"""
Main application window for GroupSplit GUI
"""
from __future__ import annotations
import base64
import logging
from typing import List, Optional

try:
    import tkinter as tk
    from tkinter import ttk, messagebox, filedialog, simpledialog
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None
    filedialog = None
    simpledialog = None

from openpyxl.utils.exceptions import InvalidFileException

from models import Group
from config import GroupStore, load_username, save_username
from computations import (
    settle_group,
    pick_random_recipient,
    pick_mouse,
    spending_by_category,
    spending_by_description,
    paid_by_member,
)
from group_ops import (
    GroupError,
    add_expense,
    add_member,
    delete_expense,
    delete_member,
    find_expense,
    find_member,
    participant_names,
    payer_name,
    rename_member,
    replace_expense,
    set_receipt,
    toggle_paid,
)
from excel_export import export_group_excel
from gui_dialogs import ExpenseDialog, GroupDialog
from csv_handler import export_groups_to_csv

logger = logging.getLogger(__name__)


class GroupSplitApp(ttk.Frame):
    """Main application window"""

    def __init__(self, master: tk.Tk, store: Optional[GroupStore] = None):
        super().__init__(master, padding=8)
        self.master = master
        self.master.geometry("1100x650")
        self.grid(row=0, column=0, sticky="nsew")
        self.master.rowconfigure(0, weight=1)
        self.master.columnconfigure(0, weight=1)

        self.store = store or GroupStore()
        self.groups: List[Group] = []
        self.current: Optional[Group] = None

        self._build_menu()
        self._build_ui()
        self._ask_username()
        self.reload_groups()

    # ---------- Menu ----------
    def _build_menu(self):
        """Build application menu bar"""
        menubar = tk.Menu(self.master)
        filem = tk.Menu(menubar, tearoff=0)
        filem.add_command(label="Export All Groups (CSV)…", command=self.export_csv_dialog)
        filem.add_command(label="Export Group Report (Excel)…", command=self.export_excel_dialog)
        filem.add_separator()
        filem.add_command(label="Delete All Groups…", command=self.reset_groups)
        filem.add_separator()
        filem.add_command(label="Exit", command=self.master.destroy)
        menubar.add_cascade(label="File", menu=filem)

        settingsm = tk.Menu(menubar, tearoff=0)
        settingsm.add_command(label="Change Username…", command=self.change_username)
        menubar.add_cascade(label="Settings", menu=settingsm)

        self.master.config(menu=menubar)

    def _ask_username(self):
        name = load_username()
        if not name:
            name = simpledialog.askstring("Welcome", "What's your name?", parent=self.master) or ""
            if name.strip():
                save_username(name)
        self._set_title(name.strip())

    def _set_title(self, username: str):
        self.master.title(f"GroupSplit - {username}" if username else "GroupSplit")

    def change_username(self):
        name = simpledialog.askstring("Username", "New username:",
                                      initialvalue=load_username(), parent=self.master)
        if name is None:
            return
        try:
            save_username(name)
        except ValueError as ex:
            messagebox.showerror("Username", str(ex))
            return
        self._set_title(name.strip())

    # ---------- UI ----------
    def _build_ui(self):
        """Build groups list and group detail tabs"""
        self.columnconfigure(1, weight=1)
        self.rowconfigure(0, weight=1)

        left = ttk.Frame(self)
        left.grid(row=0, column=0, sticky="nsw", padx=(0, 8))
        left.rowconfigure(1, weight=1)
        ttk.Label(left, text="Groups:").grid(row=0, column=0, sticky="w")
        self.group_list = tk.Listbox(left, height=24, width=28, exportselection=False)
        self.group_list.grid(row=1, column=0, sticky="nsew", pady=6)
        self.group_list.bind("<<ListboxSelect>>", lambda *_: self._on_group_select())
        gbtns = ttk.Frame(left)
        gbtns.grid(row=2, column=0, sticky="ew")
        ttk.Button(gbtns, text="New", command=self.add_group).pack(side="left", padx=2)
        ttk.Button(gbtns, text="Edit", command=self.edit_group).pack(side="left", padx=2)
        ttk.Button(gbtns, text="Delete", command=self.delete_group).pack(side="left", padx=2)

        right = ttk.Frame(self)
        right.grid(row=0, column=1, sticky="nsew")
        right.rowconfigure(1, weight=1)
        right.columnconfigure(0, weight=1)
        self.group_info = tk.StringVar(value="")
        ttk.Label(right, textvariable=self.group_info).grid(row=0, column=0, sticky="w")

        nb = ttk.Notebook(right)
        nb.grid(row=1, column=0, sticky="nsew")
        self.tab_members = ttk.Frame(nb, padding=8)
        self.tab_expenses = ttk.Frame(nb, padding=8)
        self.tab_settle = ttk.Frame(nb, padding=8)
        self.tab_reports = ttk.Frame(nb, padding=8)
        nb.add(self.tab_members, text="Members")
        nb.add(self.tab_expenses, text="Expenses")
        nb.add(self.tab_settle, text="Settlement")
        nb.add(self.tab_reports, text="Reports")

        self._build_members_tab()
        self._build_expenses_tab()
        self._build_settle_tab()
        self._build_reports_tab()

    def _tree(self, parent, cols, widths, row, height=12):
        tree = ttk.Treeview(parent, columns=cols, show="headings", height=height)
        for c, w in zip(cols, widths):
            tree.heading(c, text=c)
            tree.column(c, width=w, anchor="w")
        tree.grid(row=row, column=0, sticky="nsew", pady=6)
        return tree

    def _build_members_tab(self):
        """Build members tab"""
        self.tab_members.columnconfigure(0, weight=1)
        self.tab_members.rowconfigure(1, weight=1)
        top = ttk.Frame(self.tab_members)
        top.grid(row=0, column=0, sticky="ew")
        self.new_member_var = tk.StringVar()
        ttk.Entry(top, textvariable=self.new_member_var, width=18).pack(side="left")
        ttk.Button(top, text="Add", command=self.add_member).pack(side="left", padx=4)
        ttk.Button(top, text="Rename", command=self.rename_selected_member).pack(side="left", padx=4)
        ttk.Button(top, text="Remove", command=self.remove_selected_member).pack(side="left", padx=4)
        ttk.Button(top, text="Toggle Paid", command=self.toggle_selected_paid).pack(side="left", padx=4)

        self.member_tree = self._tree(self.tab_members, ("name", "balance", "status"), [200, 120, 120], 1, 18)
        ttk.Label(self.tab_members,
                  text="Removing a member reassigns their payments to 'Desconocido' and drops their shares.").grid(
            row=2, column=0, sticky="w")

    def _build_expenses_tab(self):
        """Build expenses tab"""
        self.tab_expenses.columnconfigure(0, weight=1)
        self.tab_expenses.rowconfigure(1, weight=1)
        top = ttk.Frame(self.tab_expenses)
        top.grid(row=0, column=0, sticky="ew")
        ttk.Button(top, text="Add", command=self.add_expense).pack(side="left", padx=3)
        ttk.Button(top, text="Edit", command=self.edit_selected_expense).pack(side="left", padx=3)
        ttk.Button(top, text="Delete", command=self.delete_selected_expense).pack(side="left", padx=3)
        ttk.Button(top, text="Attach Receipt…", command=self.attach_receipt).pack(side="left", padx=3)
        ttk.Button(top, text="Save Receipt…", command=self.save_receipt).pack(side="left", padx=3)

        cols = ("description", "category", "payer", "amount", "participants", "receipt")
        self.exp_tree = self._tree(self.tab_expenses, cols, [180, 110, 110, 90, 300, 70], 1, 18)
        yscroll = ttk.Scrollbar(self.tab_expenses, orient="vertical", command=self.exp_tree.yview)
        self.exp_tree.configure(yscroll=yscroll.set)
        yscroll.grid(row=1, column=1, sticky="ns")

    def _build_settle_tab(self):
        """Build settlement tab"""
        self.tab_settle.columnconfigure(0, weight=1)
        self.tab_settle.rowconfigure(1, weight=1)
        self.totals_var = tk.StringVar(value="")
        ttk.Label(self.tab_settle, textvariable=self.totals_var).grid(row=0, column=0, sticky="w")
        self.tr_tree = self._tree(self.tab_settle, ("from", "to", "amount"), [160, 160, 120], 1)

        btns = ttk.Frame(self.tab_settle)
        btns.grid(row=2, column=0, sticky="w")
        ttk.Button(btns, text="Who Pays Today?", command=self.pick_payer).pack(side="left", padx=3)
        ttk.Button(btns, text="Consequence for the Mouse", command=self.consequence).pack(side="left", padx=3)
        self.pick_var = tk.StringVar(value="")
        ttk.Label(self.tab_settle, textvariable=self.pick_var, wraplength=700).grid(row=3, column=0, sticky="w",
                                                                                     pady=(8, 0))

    def _build_reports_tab(self):
        """Build reports tab"""
        self.tab_reports.columnconfigure(0, weight=1)
        ttk.Label(self.tab_reports, text="By category:").grid(row=0, column=0, sticky="w")
        self.cat_tree = self._tree(self.tab_reports, ("category", "amount"), [200, 120], 1, 6)
        ttk.Label(self.tab_reports, text="By description:").grid(row=2, column=0, sticky="w")
        self.desc_tree = self._tree(self.tab_reports, ("description", "amount"), [200, 120], 3, 6)
        ttk.Label(self.tab_reports, text="Paid by member:").grid(row=4, column=0, sticky="w")
        self.paid_tree = self._tree(self.tab_reports, ("member", "paid"), [200, 120], 5, 6)

    # ---------- Persistence ----------
    def _store_call(self, title: str, action, *args) -> bool:
        """Run a store operation; on failure log it, tell the user and return False"""
        try:
            action(*args)
        except (OSError, ValueError) as ex:
            logger.exception("%s: store operation failed", title)
            messagebox.showerror(title, str(ex))
            return False
        return True

    def reload_groups(self, select_id: Optional[str] = None):
        """Reload groups from the store and keep the selection"""
        keep = select_id or (self.current.id if self.current else None)
        try:
            self.groups = self.store.list()
        except (OSError, ValueError) as ex:
            logger.exception("could not read groups")
            messagebox.showerror("Load failed", str(ex))
            self.groups = []
        self.groups.sort(key=lambda g: g.created_at, reverse=True)
        self.current = next((g for g in self.groups if g.id == keep), None)
        self.group_list.delete(0, tk.END)
        for i, g in enumerate(self.groups):
            self.group_list.insert(tk.END, g.name)
            if self.current and g.id == self.current.id:
                self.group_list.selection_set(i)
        self.refresh_all()

    def _persist(self):
        """Save the current group; unsaved edits are dropped by reloading if that fails"""
        if self._store_call("Save failed", self.store.save, self.current):
            self.refresh_all()
        else:
            self.reload_groups()

    def _on_group_select(self):
        sel = self.group_list.curselection()
        self.current = self.groups[sel[0]] if sel else None
        self.refresh_all()

    def _require_group(self) -> bool:
        if self.current is None:
            messagebox.showinfo("Group", "Select a group first.")
            return False
        return True

    # ---------- CRUD: Groups ----------
    def add_group(self):
        dlg = GroupDialog(self.master, self.groups)
        self.master.wait_window(dlg)
        if dlg.result and self._store_call("Save failed", self.store.save, dlg.result):
            self.reload_groups(dlg.result.id)

    def edit_group(self):
        if not self._require_group():
            return
        dlg = GroupDialog(self.master, self.groups, self.current)
        self.master.wait_window(dlg)
        if dlg.result:
            self._store_call("Save failed", self.store.save, dlg.result)
            self.reload_groups(dlg.result.id)

    def delete_group(self):
        if not self._require_group():
            return
        if messagebox.askyesno("Delete group", f"Delete '{self.current.name}' and all its expenses?"):
            if self._store_call("Delete failed", self.store.delete, self.current.id):
                self.current = None
            self.reload_groups()

    def reset_groups(self):
        if messagebox.askyesno("Delete all", "Delete ALL groups? This cannot be undone."):
            if self._store_call("Delete failed", self.store.reset):
                self.current = None
            self.reload_groups()

    # ---------- CRUD: Members ----------
    def _selected_member_id(self) -> Optional[str]:
        sel = self.member_tree.selection()
        return sel[0] if sel else None

    def add_member(self):
        if not self._require_group():
            return
        try:
            add_member(self.current, self.new_member_var.get())
        except GroupError as ex:
            messagebox.showinfo("Members", str(ex))
            return
        self.new_member_var.set("")
        self._persist()

    def rename_selected_member(self):
        mid = self._selected_member_id()
        if not mid:
            messagebox.showinfo("Rename", "Select a member first.")
            return
        m = find_member(self.current, mid)
        name = simpledialog.askstring("Rename", "New name:", initialvalue=m.name, parent=self.master)
        if name is None:
            return
        try:
            rename_member(self.current, mid, name)
        except GroupError as ex:
            messagebox.showerror("Rename", str(ex))
            return
        self._persist()

    def remove_selected_member(self):
        mid = self._selected_member_id()
        if not mid:
            return
        m = find_member(self.current, mid)
        if messagebox.askyesno("Remove member",
                               f"Remove '{m.name}'? Their payments will be reassigned to 'Desconocido' "
                               "and their shares removed."):
            delete_member(self.current, mid)
            self._persist()

    def toggle_selected_paid(self):
        mid = self._selected_member_id()
        if not mid:
            messagebox.showinfo("Paid", "Select a member first.")
            return
        toggle_paid(self.current, mid)
        self._persist()

    # ---------- CRUD: Expenses ----------
    def _selected_expense_id(self) -> Optional[str]:
        sel = self.exp_tree.selection()
        if not sel:
            messagebox.showinfo("Expenses", "Select an expense row first.")
            return None
        return sel[0]

    def add_expense(self):
        """Add new expense"""
        if not self._require_group():
            return
        if not self.current.members:
            messagebox.showerror("No members", "Please add at least one member first.")
            return
        dlg = ExpenseDialog(self.master, self.current, None)
        self.master.wait_window(dlg)
        if dlg.result:
            add_expense(self.current, dlg.result)
            self._persist()

    def edit_selected_expense(self):
        """Edit selected expense"""
        eid = self._selected_expense_id()
        if not eid:
            return
        e = find_expense(self.current, eid)
        dlg = ExpenseDialog(self.master, self.current, e)
        self.master.wait_window(dlg)
        if dlg.result:
            replace_expense(self.current, dlg.result)
            self._persist()

    def delete_selected_expense(self):
        """Delete selected expense"""
        eid = self._selected_expense_id()
        if not eid:
            return
        if messagebox.askyesno("Delete", "Delete selected expense?"):
            delete_expense(self.current, eid)
            self._persist()

    def attach_receipt(self):
        eid = self._selected_expense_id()
        if not eid:
            return
        fp = filedialog.askopenfilename(
            title="Attach receipt image",
            filetypes=[("Images", "*.jpg *.jpeg *.png"), ("All files", "*.*")]
        )
        if not fp:
            return
        try:
            with open(fp, "rb") as f:
                data = base64.b64encode(f.read()).decode("ascii")
        except OSError as ex:
            messagebox.showerror("Receipt", str(ex))
            return
        set_receipt(self.current, eid, data)
        self._persist()

    def save_receipt(self):
        eid = self._selected_expense_id()
        if not eid:
            return
        e = find_expense(self.current, eid)
        if not e.receipt_image:
            messagebox.showinfo("Receipt", "This expense has no receipt.")
            return
        fp = filedialog.asksaveasfilename(title="Save receipt", defaultextension=".jpg",
                                          filetypes=[("JPEG", "*.jpg"), ("All files", "*.*")])
        if not fp:
            return
        try:
            with open(fp, "wb") as f:
                f.write(base64.b64decode(e.receipt_image))
        except (OSError, ValueError) as ex:
            messagebox.showerror("Receipt", str(ex))

    # ---------- Pickers ----------
    def pick_payer(self):
        if not self._require_group():
            return
        m = pick_random_recipient(self.current.members)
        if m is None:
            self.pick_var.set("No members in this group to pick from.")
            return
        self.pick_var.set(f"Today {m.name} pays!")

    def consequence(self):
        if not self._require_group():
            return
        totals, _ = settle_group(self.current)
        picked = pick_mouse(self.current, totals.balances)
        if picked is None:
            self.pick_var.set("No mice today! Everyone with debts has settled up.")
            return
        mouse, what = picked
        self.pick_var.set(f"The mouse is {mouse.name}! Their consequence: {what}")

    # ---------- Exports ----------
    def export_csv_dialog(self):
        """Export every group's expenses to CSV"""
        if not self.groups:
            messagebox.showinfo("Export CSV", "No groups to export.")
            return
        fp = filedialog.asksaveasfilename(
            title="Export Groups to CSV",
            defaultextension=".csv",
            initialfile="groupsplit_gastos.csv",
            filetypes=[("CSV files", "*.csv"), ("All files", "*.*")]
        )
        if not fp:
            return
        try:
            n = export_groups_to_csv(self.groups, fp)
            messagebox.showinfo("Export CSV", f"Exported {n} rows to:\n{fp}")
        except (OSError, ValueError) as ex:
            logger.exception("CSV export failed")
            messagebox.showerror("Export failed", str(ex))

    def export_excel_dialog(self):
        """Export the selected group to Excel"""
        if not self._require_group():
            return
        fp = filedialog.asksaveasfilename(
            title="Export Excel",
            defaultextension=".xlsx",
            filetypes=[("Excel Workbook", "*.xlsx")]
        )
        if not fp:
            return
        try:
            export_group_excel(self.current, fp)
            messagebox.showinfo("Export", f"Exported: {fp}")
        except (OSError, ValueError, InvalidFileException) as ex:
            logger.exception("Excel export failed")
            messagebox.showerror("Export failed", str(ex))

    # ---------- Refresh ----------
    def refresh_all(self):
        """Refresh all UI elements"""
        g = self.current
        if g is None:
            self.group_info.set("No group selected")
        else:
            info = f"{g.name}   Date: {g.gathering_date or 'No especificada'}"
            if g.gathering_location:
                info += f"   Location: {g.gathering_location}"
            self.group_info.set(info)
        self.pick_var.set("")
        self.refresh_members_and_settlement()
        self.refresh_expenses()
        self.refresh_reports()

    @staticmethod
    def _clear(tree):
        for iid in tree.get_children():
            tree.delete(iid)

    def refresh_members_and_settlement(self):
        self._clear(self.member_tree)
        self._clear(self.tr_tree)
        if self.current is None:
            self.totals_var.set("")
            return
        totals, transactions = settle_group(self.current)
        for m in self.current.members:
            bal = totals.balances.get(m.id, 0.0)
            status = "Paid" if m.has_paid else "Pending"
            self.member_tree.insert("", "end", iid=m.id, values=(m.name, f"{bal:.2f}", status))
        self.totals_var.set(f"Total spent: {totals.total_spent:.2f}   "
                            f"Each should pay: {totals.each_should_pay:.2f}")
        for t in transactions:
            self.tr_tree.insert("", "end", values=(t.from_member.name, t.to_member.name, f"{t.amount:.2f}"))

    def refresh_expenses(self):
        """Refresh expenses tree view"""
        self._clear(self.exp_tree)
        if self.current is None:
            return
        g = self.current
        for e in g.expenses:
            values = (
                e.description, e.category, payer_name(g, e), f"{e.amount:.2f}",
                ", ".join(participant_names(g, e)), "yes" if e.receipt_image else "",
            )
            self.exp_tree.insert("", "end", iid=e.id, values=values)

    def refresh_reports(self):
        """Refresh reports tab"""
        for tree in (self.cat_tree, self.desc_tree, self.paid_tree):
            self._clear(tree)
        if self.current is None:
            return
        g = self.current
        for cat, amt in spending_by_category(g).items():
            self.cat_tree.insert("", "end", values=(cat, f"{amt:.2f}"))
        for desc, amt in spending_by_description(g).items():
            self.desc_tree.insert("", "end", values=(desc, f"{amt:.2f}"))
        paid = paid_by_member(g)
        for m in g.members:
            self.paid_tree.insert("", "end", values=(m.name, f"{paid[m.id]:.2f}"))
