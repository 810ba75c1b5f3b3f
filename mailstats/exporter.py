"""Write collected MailRecords to a formatted Excel workbook.

Rows get a second, coarser duplicate check here: subject, sender and the
minute of sending form a comparison key. The first row carrying a key stays
visible, later rows are flagged ``Duplicate`` and hidden by the table's
default filter. Nothing is deleted.
"""

import logging
import os
import shutil
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, Alignment
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.filters import (AutoFilter, CustomFilter, CustomFilters, FilterColumn,
                                        SortCondition, SortState)
from openpyxl.worksheet.table import Table, TableStyleInfo

from .config import DEFAULT_PREFIX
from .errors import TemplateNotFoundError
from .helpers import to_minute
from .models import MailRecord

logger = logging.getLogger(__name__)

SHEET_NAME = "MailStats"
INFO_SHEET_NAME = "RunInfo"
TABLE_NAME = "MailStatsTable"
DUPLICATE_FLAG = "Duplicate"
KEY_SEPARATOR = "|"
KEY_ESCAPE = "\\"
OPEN_LABEL = "Open"
SENT_FORMAT = "yyyy-mm-dd hh:mm"

RECORD_COLUMNS = [
    "StoreID", "EntryID", "Open", "SentOn", "Sender", "OnBehalfOf", "Subject",
    "FolderPath", "WordCount", "Recipients", "Mailbox",
]
COLUMNS = RECORD_COLUMNS + ["ComparisonKey", "Duplicate"]
HIDDEN_COLUMNS = ("StoreID", "EntryID", "ComparisonKey")
COLUMN_WIDTHS = {
    "StoreID": 8, "EntryID": 9, "Open": 7, "SentOn": 17, "Sender": 25,
    "OnBehalfOf": 22, "Subject": 50, "FolderPath": 40, "WordCount": 11,
    "Recipients": 45, "Mailbox": 25, "ComparisonKey": 10, "Duplicate": 12,
}

HEADER_FONT = Font(bold=True)
LINK_FONT = Font(color="0563C1", underline="single")


# ----------------- Frame -----------------

def _key_part(value: str) -> str:
    return value.strip().replace(KEY_ESCAPE, KEY_ESCAPE * 2).replace(KEY_SEPARATOR, KEY_ESCAPE + KEY_SEPARATOR)


def comparison_key(subject: str, sender: str, sent_on: datetime) -> str:
    return KEY_SEPARATOR.join([_key_part(subject), _key_part(sender), to_minute(sent_on)]).lower()


def open_link(entry_id: str) -> str:
    return f'=HYPERLINK("outlook:{entry_id}","{OPEN_LABEL}")'


def clean_text(value: str) -> str:
    """Drop control characters that cannot be stored in a worksheet cell."""
    return ILLEGAL_CHARACTERS_RE.sub("", value)


def records_frame(records: Sequence[MailRecord]) -> pd.DataFrame:
    rows: List[Dict[str, Any]] = []
    for r in records:
        entry_id = clean_text(r.entry_id)
        rows.append({
            "StoreID": clean_text(r.store_id),
            "EntryID": entry_id,
            "Open": open_link(entry_id),
            "SentOn": r.sent_on,
            "Sender": clean_text(r.sender),
            "OnBehalfOf": clean_text(r.behalf_of or ""),
            "Subject": clean_text(r.subject),
            "FolderPath": clean_text(r.folder_path),
            "WordCount": r.word_count,
            "Recipients": clean_text(r.recipients),
            "Mailbox": clean_text(r.mailbox),
        })
    return pd.DataFrame(rows, columns=RECORD_COLUMNS)


def add_comparison_keys(df: pd.DataFrame) -> pd.DataFrame:
    df["ComparisonKey"] = [
        comparison_key(subj, sender, pd.Timestamp(sent).to_pydatetime())
        for subj, sender, sent in zip(df["Subject"], df["Sender"], df["SentOn"])
    ]
    return df


def mark_duplicates(df: pd.DataFrame) -> pd.DataFrame:
    """Flag every row whose comparison key already appeared in an earlier row."""
    dup = df["ComparisonKey"].duplicated(keep="first")
    df["Duplicate"] = dup.map({True: DUPLICATE_FLAG, False: ""})
    return df


def sort_by_sent(df: pd.DataFrame) -> pd.DataFrame:
    return df.sort_values("SentOn", ascending=False, kind="mergesort").reset_index(drop=True)


def prepare_frame(records: Sequence[MailRecord]) -> pd.DataFrame:
    df = records_frame(records)
    df = add_comparison_keys(df)
    df = mark_duplicates(df)
    return sort_by_sent(df).loc[:, COLUMNS]


# ----------------- Sheet formatting -----------------

def _col(name: str) -> str:
    return get_column_letter(COLUMNS.index(name) + 1)


def format_sheet(ws, df: pd.DataFrame) -> None:
    last_row = len(df) + 1
    last_col = get_column_letter(len(COLUMNS))
    ref = f"A1:{last_col}{last_row}"

    for cell in ws[1]:
        cell.font = HEADER_FONT

    sent_col, open_col = _col("SentOn"), _col("Open")
    for r, flag in enumerate(df["Duplicate"], start=2):
        ws[f"{sent_col}{r}"].number_format = SENT_FORMAT
        link = ws[f"{open_col}{r}"]
        link.font = LINK_FONT
        link.alignment = Alignment(horizontal="center")
        if flag == DUPLICATE_FLAG:
            ws.row_dimensions[r].hidden = True

    # only the Open column holds formulas; text such as "=== weekly ===" stays text
    for row in ws.iter_rows(min_row=2, max_row=last_row):
        for cell in row:
            if cell.column_letter != open_col and cell.data_type == "f":
                cell.data_type = "s"

    for name in COLUMNS:
        dim = ws.column_dimensions[_col(name)]
        dim.width = COLUMN_WIDTHS[name]
        if name in HIDDEN_COLUMNS:
            dim.hidden = True

    not_duplicate = FilterColumn(
        colId=COLUMNS.index("Duplicate"),
        customFilters=CustomFilters(customFilter=[CustomFilter(operator="notEqual", val=DUPLICATE_FLAG)]),
    )
    table = Table(
        displayName=TABLE_NAME,
        ref=ref,
        autoFilter=AutoFilter(ref=ref, filterColumn=[not_duplicate]),
        sortState=SortState(
            ref=f"A2:{last_col}{last_row}",
            sortCondition=[SortCondition(ref=f"{sent_col}2:{sent_col}{last_row}", descending=True)],
        ),
        tableStyleInfo=TableStyleInfo(name="TableStyleMedium2", showRowStripes=True),
    )
    ws.add_table(table)
    ws.freeze_panes = "A2"


# ----------------- Workbook -----------------

def build_output_path(output_dir: str, prefix: str, ext: str, now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return os.path.join(output_dir, f"{prefix}_{stamp}{ext}")


def check_template(template: Optional[str]) -> None:
    if template and not os.path.isfile(template):
        raise TemplateNotFoundError(template)


def _open_writer(out_path: str, template: Optional[str]) -> pd.ExcelWriter:
    if not template:
        return pd.ExcelWriter(out_path, engine="openpyxl")
    shutil.copyfile(template, out_path)
    engine_kwargs = {"keep_vba": True} if out_path.lower().endswith(".xlsm") else {}
    return pd.ExcelWriter(out_path, engine="openpyxl", mode="a",
                          if_sheet_exists="replace", engine_kwargs=engine_kwargs)


def export_records(records: Sequence[MailRecord], output_dir: str, template: Optional[str] = None,
                   prefix: str = DEFAULT_PREFIX, run_info: Optional[Dict[str, Any]] = None,
                   now: Optional[datetime] = None) -> Optional[str]:
    """Write the workbook and return its path, or None when there is nothing to write."""
    if not records:
        logger.warning("No emails matched; no workbook written.")
        return None
    check_template(template)

    os.makedirs(output_dir, exist_ok=True)
    ext = os.path.splitext(template)[1] if template else ".xlsx"
    out_path = build_output_path(output_dir, prefix, ext, now)

    df = prepare_frame(records)
    flagged = int((df["Duplicate"] == DUPLICATE_FLAG).sum())

    logger.info("Writing Excel...")
    with _open_writer(out_path, template) as w:
        df.to_excel(w, sheet_name=SHEET_NAME, index=False)
        format_sheet(w.sheets[SHEET_NAME], df)
        if run_info:
            info = pd.DataFrame(list(run_info.items()), columns=["Setting", "Value"])
            info.to_excel(w, sheet_name=INFO_SHEET_NAME, index=False)
            w.sheets[INFO_SHEET_NAME].column_dimensions["A"].width = 28
            w.sheets[INFO_SHEET_NAME].column_dimensions["B"].width = 60

    logger.info("Exported %d emails (%d flagged as duplicate) to %s", len(df), flagged, out_path)
    return out_path
