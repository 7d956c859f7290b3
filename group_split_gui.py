"""
GroupSplit GUI
- Track shared expenses of a group: who paid, who took part, who owes whom.
- Suggest the fewest transfers that settle the group, pick a random payer,
  and export reports to CSV or Excel.

Run:
  python group_split_gui.py

Dependencies:
  pip install openpyxl
(Tkinter ships with most Python distributions; on some Linux you may need: sudo apt-get install python3-tk)
"""
from __future__ import annotations

try:
    import tkinter as tk
except ModuleNotFoundError:
    tk = None

from config import setup_logging


def main():
    """Main entry point for the application"""
    if tk is None:
        raise RuntimeError(
            'tkinter is not available. Install it (e.g., on Ubuntu: sudo apt-get install python3-tk) '
            'and re-run to use the GUI.'
        )
    setup_logging()

    from main_app import GroupSplitApp

    root = tk.Tk()
    GroupSplitApp(root)
    root.mainloop()


if __name__ == "__main__":
    main()
