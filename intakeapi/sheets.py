"""
Submission log stored as a workbook of sheets, one sheet per form type.

A sheet's header row is written once, from the first record received for that
form type, and is never changed afterwards. Later records are projected onto
that header: fields it does not know about are dropped and fields it expects
but the record lacks are written as empty cells.
"""
import logging
import re
from typing import Any, Dict, List

from intakeapi.config import config
from intakeapi.database import database, sheet_table, sheetrow_table, spreadsheet_table
from intakeapi.models.intake import FORM_TYPE_KEY, Sheet

logger = logging.getLogger(__name__)

TIMESTAMP_HEADER = "Timestamp"
FORM_TYPE_HEADER = "Form Type"
SKIP_KEYS = [FORM_TYPE_KEY]


def key_to_header(key: str) -> str:
    """`company_name` / `companyName` -> `Company Name`."""
    header = key.replace("_", " ")
    header = re.sub(r"([A-Z])", r" \1", header)
    header = re.sub(r"\b\w", lambda m: m.group(0).upper(), header, flags=re.ASCII)
    return header.strip()


def header_to_key(header: str) -> str:
    key = header.lower()
    key = re.sub(r"\s+", "_", key)
    return re.sub(r"[^a-z0-9_]", "", key)


def normalize_key(key: str) -> str:
    """The key a field is stored under once its header has been read back."""
    key = re.sub(r"[^a-z0-9_]", "", key.lower())
    key = re.sub(r"_+", "_", key)
    return key.strip("_")


def _text(value: Any) -> str:
    # JSON spelling, so true stays "true"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def cell_value(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(_text(v) for v in value)
    if not value:
        return ""
    return _text(value)


def headers_for_record(record: Dict[str, Any]) -> List[str]:
    headers = [TIMESTAMP_HEADER, FORM_TYPE_HEADER]
    for key in record:
        if key not in SKIP_KEYS:
            headers.append(key_to_header(key))
    return headers


def build_row(header: List[str], form_type: str, timestamp: str, record: Dict[str, Any]) -> List[str]:
    row = []
    for column in header:
        if column == TIMESTAMP_HEADER:
            row.append(timestamp)
        elif column == FORM_TYPE_HEADER:
            row.append(form_type)
        else:
            row.append(cell_value(record.get(header_to_key(column))))
    return row


async def _insert_or_fetch(insert_query, select_query):
    # two first-submissions can race; the unique constraint picks one winner
    try:
        async with database.transaction():
            await database.execute(insert_query)
    except Exception as e:
        existing = await database.fetch_one(select_query)
        if existing is None:
            raise
        logger.info(f"Lost creation race, reusing existing row: {e}")
        return existing
    return await database.fetch_one(select_query)


async def get_or_create_spreadsheet(name: str):
    select_query = spreadsheet_table.select().where(spreadsheet_table.c.name == name)
    spreadsheet = await database.fetch_one(select_query)
    if spreadsheet:
        return spreadsheet

    logger.info(f"Creating spreadsheet '{name}'")
    return await _insert_or_fetch(
        spreadsheet_table.insert().values(name=name),
        select_query
    )


async def get_sheet(spreadsheet_id: int, name: str) -> Sheet | None:
    query = sheet_table.select().where(
        (sheet_table.c.spreadsheet_id == spreadsheet_id) &
        (sheet_table.c.name == name)
    )
    row = await database.fetch_one(query)
    if not row:
        return None
    return Sheet(
        id=row.id,
        spreadsheet_id=row.spreadsheet_id,
        name=row.name,
        header=row.header,
        header_bold=row.header_bold,
        frozen_rows=row.frozen_rows
    )


async def get_or_create_sheet(spreadsheet_id: int, form_type: str, record: Dict[str, Any]) -> Sheet:
    sheet = await get_sheet(spreadsheet_id, form_type)
    if sheet:
        return sheet

    header = headers_for_record(record)
    logger.info(f"Creating sheet '{form_type}' with header {header}")
    await _insert_or_fetch(
        sheet_table.insert().values(
            spreadsheet_id=spreadsheet_id,
            name=form_type,
            header=header,
            header_bold=True,
            frozen_rows=1
        ),
        sheet_table.select().where(
            (sheet_table.c.spreadsheet_id == spreadsheet_id) &
            (sheet_table.c.name == form_type)
        )
    )
    return await get_sheet(spreadsheet_id, form_type)


async def append_submission(form_type: str, timestamp: str, record: Dict[str, Any]) -> List[str]:
    # serverless runtimes may skip the lifespan hook
    if not database.is_connected:
        await database.connect()
    spreadsheet = await get_or_create_spreadsheet(config.SPREADSHEET_NAME)
    sheet = await get_or_create_sheet(spreadsheet.id, form_type, record)

    row = build_row(sheet.header, form_type, timestamp, record)
    await database.execute(sheetrow_table.insert().values(sheet_id=sheet.id, cells=row))
    logger.debug(f"Appended row to sheet '{form_type}'", extra={"cells": len(row)})
    return row


async def read_rows(form_type: str) -> List[List[str]]:
    """All rows of a form type's sheet, header first. Empty when the sheet does not exist."""
    spreadsheet = await database.fetch_one(
        spreadsheet_table.select().where(spreadsheet_table.c.name == config.SPREADSHEET_NAME)
    )
    if not spreadsheet:
        return []
    sheet = await get_sheet(spreadsheet.id, form_type)
    if not sheet:
        return []

    query = sheetrow_table.select().where(
        sheetrow_table.c.sheet_id == sheet.id
    ).order_by(sheetrow_table.c.id)
    rows = await database.fetch_all(query)
    return [sheet.header] + [list(r.cells) for r in rows]
