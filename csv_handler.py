"""
CSV export functionality for GroupSplit
"""
from __future__ import annotations
import csv
import logging
from typing import List

from models import Group
from group_ops import participant_names, payer_name
from computations import individual_share
from utils import format_created

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Grupo", "Miembro", "Gasto", "Monto", "Pagador", "Participantes",
    "Aporte Individual", "Fecha de Creación", "Fecha de Juntada",
]


def export_groups_to_csv(groups: List[Group], filepath: str) -> int:
    """
    Export every group's expenses to one CSV file.
    Groups without expenses get a single placeholder row.
    Returns the number of data rows written.
    """
    rows = 0
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)

        for g in groups:
            created = format_created(g.created_at)
            gathering = g.gathering_date or "N/A"
            if not g.expenses:
                writer.writerow([g.name, "N/A", "N/A", "0.00", "N/A", "N/A", "0.00", created, gathering])
                rows += 1
                continue
            for e in g.expenses:
                payer = payer_name(g, e)
                each = individual_share(e)
                writer.writerow([
                    g.name,
                    payer,
                    e.description,
                    f"{e.amount:.2f}",
                    payer,
                    ';'.join(participant_names(g, e)),
                    f"{each:.2f}",
                    created,
                    gathering,
                ])
                rows += 1

    logger.info("exported %d rows from %d groups to %s", rows, len(groups), filepath)
    return rows
