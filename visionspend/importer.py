"""
Delimited file import.

Turns raw file text into Transactions. Parsing is lossy on purpose: a line that
cannot be read as a transaction is dropped, not reported. Only the file level
result (how many rows came out) is surfaced to the caller through ImportResult.

Supported kinds:
- csv: comma delimited
- tsv: tab delimited
- txt: tab delimited if the text contains a tab, comma otherwise
- xlsx: experimental; the decoded bytes are parsed as comma delimited text
"""

import logging
import os
import pathlib
import re
import uuid
from typing import List, Optional, Sequence

from .categories import CategoryRule, infer_category
from .classify import classify_fields, clean_amount, standardize_date
from .models import (
    ImportResult,
    Rejected,
    Transaction,
    UNCATEGORIZED,
    UnsupportedFileTypeError,
)

logger = logging.getLogger(__name__)

FILE_KINDS = {
    '.csv': 'csv',
    '.tsv': 'tsv',
    '.txt': 'txt',
    '.xlsx': 'xlsx',
}

ENCODINGS = ['utf-8-sig', 'utf-8', 'cp1252']

XLSX_WARNING = "XLSX file parsing is experimental and may not work for all files. CSV is recommended."

_LINE_BREAK = re.compile(r'\r?\n')


def generate_id() -> str:
    return uuid.uuid4().hex


def split_fields(line: str, delimiter: str) -> List[str]:
    """Split a line and strip whitespace plus one surrounding quote per side."""
    fields = []
    for value in line.split(delimiter):
        value = value.strip()
        if value.startswith('"'):
            value = value[1:]
        if value.endswith('"'):
            value = value[:-1]
        fields.append(value)
    return fields


def is_header(line: str) -> bool:
    lowered = line.lower()
    return 'date' in lowered and 'description' in lowered


def parse_line(line: str, delimiter: str,
               rules: Optional[Sequence[CategoryRule]] = None) -> Optional[Transaction]:
    """Parse one physical line into a Transaction.

    Args:
        line (str): Raw line without its line break
        delimiter (str): Field delimiter
        rules (list, optional): Category rules used when the row has no category

    Returns:
        Transaction or None: None for blank lines and rows that cannot be read
    """
    if not line.strip():
        return None

    result = classify_fields(split_fields(line, delimiter))
    if isinstance(result, Rejected):
        logger.debug(f"Dropping line {line!r}: {result.reason}")
        return None

    date = standardize_date(result.date_text)
    if date is None:
        logger.debug(f"Dropping line {line!r}: invalid date {result.date_text!r}")
        return None

    amount = clean_amount(result.amount_text)
    if amount is None:
        logger.debug(f"Dropping line {line!r}: invalid amount {result.amount_text!r}")
        return None

    category = result.category or infer_category(result.description, rules)

    return Transaction(
        id=generate_id(),
        date=date,
        description=result.description,
        amount=amount,
        category=category or UNCATEGORIZED,
    )


def parse_delimited(file_content: str, delimiter: str,
                    rules: Optional[Sequence[CategoryRule]] = None) -> List[Transaction]:
    """Parse delimited text into Transactions, in file order.

    The first line is skipped when it mentions both 'date' and 'description'.
    Never raises; an unreadable file simply yields an empty list.
    """
    lines = _LINE_BREAK.split(file_content)
    start = 1 if lines and is_header(lines[0]) else 0

    transactions = []
    for line in lines[start:]:
        transaction = parse_line(line, delimiter, rules)
        if transaction is not None:
            transactions.append(transaction)

    logger.debug(f"Parsed {len(transactions)} transactions from {len(lines) - start} lines")
    return transactions


def parse_csv(file_content: str, rules=None) -> List[Transaction]:
    return parse_delimited(file_content, ',', rules)


def parse_tsv(file_content: str, rules=None) -> List[Transaction]:
    return parse_delimited(file_content, '\t', rules)


def parse_txt(file_content: str, rules=None) -> List[Transaction]:
    # Guess the delimiter; anything without a tab is treated as CSV
    if '\t' in file_content:
        return parse_tsv(file_content, rules)
    return parse_csv(file_content, rules)


PARSERS = {
    'csv': parse_csv,
    'tsv': parse_tsv,
    'txt': parse_txt,
    'xlsx': parse_csv,
}


def detect_file_kind(file_name) -> str:
    """Map a file name to one of the supported kinds.

    Raises:
        UnsupportedFileTypeError: If the extension is not csv, tsv, txt or xlsx
    """
    _, ext = os.path.splitext(str(file_name))
    kind = FILE_KINDS.get(ext.lower())
    if kind is None:
        raise UnsupportedFileTypeError(
            f"Unsupported file type: {ext or file_name}. Please upload CSV, TSV, TXT, or XLSX."
        )
    return kind


def decode_upload(data: bytes) -> str:
    """Decode uploaded bytes, trying each of ENCODINGS in turn.

    Raises:
        ValueError: If no encoding can decode the data
    """
    for encoding in ENCODINGS:
        try:
            text = data.decode(encoding)
        except UnicodeDecodeError:
            continue
        logger.debug(f"Decoded upload with encoding: {encoding}")
        return text
    raise ValueError("Could not decode file with any supported encoding")


def count_data_lines(file_content: str) -> int:
    lines = _LINE_BREAK.split(file_content)
    start = 1 if lines and is_header(lines[0]) else 0
    return sum(1 for line in lines[start:] if line.strip())


def import_text(file_content: str, file_name: str,
                rules: Optional[Sequence[CategoryRule]] = None) -> ImportResult:
    """Import already decoded text, choosing the parser from the file name.

    Args:
        file_content (str): Decoded file text
        file_name (str): Original file name, used to pick the delimiter
        rules (list, optional): Category rules for rows without a category

    Returns:
        ImportResult: status 'ok', 'empty' or 'unsupported'
    """
    name = os.path.basename(str(file_name))
    try:
        kind = detect_file_kind(name)
    except UnsupportedFileTypeError as e:
        logger.warning(str(e))
        return ImportResult(file_name=name, status='unsupported', message=str(e))

    warnings = ()
    if kind == 'xlsx':
        logger.warning(f"{name}: {XLSX_WARNING}")
        warnings = (XLSX_WARNING,)

    transactions = PARSERS[kind](file_content, rules)

    if not transactions:
        if count_data_lines(file_content) == 0:
            message = f"No data rows found in {name}."
        else:
            message = (f"No transactions found or file format error in {name}. "
                       f"Ensure it has Date, Description, Amount.")
        logger.warning(message)
        return ImportResult(file_name=name, status='empty', message=message, warnings=warnings)

    logger.info(f"Imported {len(transactions)} transactions from {name}")
    return ImportResult(
        file_name=name,
        status='ok',
        transactions=tuple(transactions),
        message=f"{len(transactions)} transactions imported from {name}.",
        warnings=warnings,
    )


def import_file(file_path, rules: Optional[Sequence[CategoryRule]] = None) -> ImportResult:
    """Read, decode and import a file from disk.

    The file kind is checked before anything is read, so an unsupported file
    never touches the disk. An XLSX workbook that no encoding can decode is
    read lossily instead, so it ends up on the empty-result path with the
    XLSX warning rather than being reported unreadable.

    Args:
        file_path (str or Path): File to import
        rules (list, optional): Category rules for rows without a category

    Returns:
        ImportResult: Outcome of the import; never raises for bad input files
    """
    file_path = pathlib.Path(file_path)
    name = file_path.name

    try:
        kind = detect_file_kind(name)
    except UnsupportedFileTypeError as e:
        logger.warning(str(e))
        return ImportResult(file_name=name, status='unsupported', message=str(e))

    unreadable = ImportResult(
        file_name=name,
        status='unreadable',
        message=f"Failed to read or parse {name}. Ensure it is a valid text-based format (CSV, TSV, TXT).",
    )

    try:
        data = file_path.read_bytes()
    except OSError as e:
        logger.error(f"Error reading {file_path}: {str(e)}")
        return unreadable

    try:
        file_content = decode_upload(data)
    except ValueError as e:
        if kind != 'xlsx':
            logger.error(f"Error decoding {file_path}: {str(e)}")
            return unreadable
        logger.debug(f"Decoding {name} with replacement characters")
        file_content = data.decode(ENCODINGS[0], errors='replace')

    return import_text(file_content, name, rules)
