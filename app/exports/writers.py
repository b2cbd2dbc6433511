### app/exports/writers.py

"""
Export File Writers

Serialize aggregated youth documents into one of three formats:

- json: the document hierarchy as-is, pretty-printed
- csv:  one flat row per profile, related collections reduced to a count
        and a "; " separated summary
- xlsx: one sheet of profiles, one sheet per non-empty related collection
        and an "Export Info" sheet describing the export

Column sets are always the sorted union of keys across rows, so the same
documents produce the same columns regardless of row order.
"""

import csv
import json
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from openpyxl import Workbook
from openpyxl.cell import WriteOnlyCell
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from app.exports.exceptions import SerializationError
from app.exports.models import ExportFormat
from app.utils.logger import get_logger

logger = get_logger(__name__)

SUMMARY_SEPARATOR = "; "
COLUMN_WIDTH = 20
PROFILES_SHEET_TITLE = "Youth Profiles"
METADATA_SHEET_TITLE = "Export Info"


def _text(item: Dict[str, Any], key: str) -> str:
    value = item.get(key)
    return "" if value is None else str(value)


@dataclass(frozen=True)
class CollectionLayout:
    """How a related collection is presented in flat and sheet formats."""

    prefix: str
    sheet_title: str
    label: str
    digest: Callable[[Dict[str, Any]], str]


COLLECTION_LAYOUTS: Dict[str, CollectionLayout] = {
    "education": CollectionLayout(
        "education", "Education", "Education",
        lambda e: f"{_text(e, 'qualificationName')} - {_text(e, 'institution')}",
    ),
    "skills": CollectionLayout(
        "skills", "Skills", "Skills",
        lambda s: f"{_text(s, 'skillName')} ({_text(s, 'proficiency')})",
    ),
    "certifications": CollectionLayout(
        "certifications", "Certifications", "Certifications",
        lambda c: f"{_text(c, 'certificationName')} - {_text(c, 'issuingOrganization')}",
    ),
    "training": CollectionLayout(
        "training", "Training", "Training",
        lambda t: f"{_text(t, 'programName')} ({_text(t, 'status')})",
    ),
    "businesses": CollectionLayout(
        "businesses", "Businesses", "Businesses",
        lambda b: f"{_text(b, 'businessName')} ({_text(b, 'role')})",
    ),
    "portfolioProjects": CollectionLayout(
        "portfolio", "Portfolio Projects", "Portfolio",
        lambda p: _text(p, "title"),
    ),
    "socialMediaLinks": CollectionLayout(
        "socialMedia", "Social Media", "Social Media",
        lambda s: f"{_text(s, 'platform')}: {_text(s, 'url')}",
    ),
}


@dataclass
class ExportMetadata:
    """Describes an export for the Export Info sheet."""

    title: str = "Youth Profiles Export"
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    filters: Dict[str, Any] = field(default_factory=dict)
    include: Dict[str, bool] = field(default_factory=dict)  # keyed by collection key
    sort_by: Optional[str] = None
    sort_direction: Optional[str] = None


def prettify_header(key: str) -> str:
    """
    camelCase field name to a column header.

    A space goes before every capital letter and the first character is
    upper-cased: participantCode -> "Participant Code", id -> "Id".
    """
    spaced = re.sub(r"([A-Z])", r" \1", key)
    return spaced[:1].upper() + spaced[1:]


def column_union(rows: Iterable[Dict[str, Any]]) -> List[str]:
    """Sorted union of keys across rows."""
    keys = set()
    for row in rows:
        keys.update(row.keys())
    return sorted(keys)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _to_json(value: Any) -> str:
    return json.dumps(value, default=_json_default, ensure_ascii=False)


def serialize_value(value: Any) -> Any:
    """
    Serialize value for a CSV cell (handle dates, decimals, None, etc.)
    """
    if value is None:
        return ""
    elif isinstance(value, bool):
        return "true" if value else "false"
    elif isinstance(value, (datetime, date)):
        return value.isoformat()
    elif isinstance(value, Decimal):
        return str(float(value))
    elif isinstance(value, (list, dict)):
        return _to_json(value)
    else:
        return value


def cell_value(value: Any) -> Any:
    """
    Convert a value to something openpyxl can store in a cell.
    """
    if value is None:
        return None
    elif isinstance(value, datetime):
        # Excel has no timezone support
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    elif isinstance(value, Decimal):
        return float(value)
    elif isinstance(value, (list, dict)):
        return ILLEGAL_CHARACTERS_RE.sub("", _to_json(value))
    elif isinstance(value, str):
        # openpyxl rejects control characters
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def flatten_document(document: Dict[str, Any]) -> Dict[str, Any]:
    """
    One CSV row for a youth document.

    Related collections become <prefix>Count and <prefix>Summary; other
    nested values are JSON-encoded.
    """
    row: Dict[str, Any] = {}
    for key, value in document.items():
        layout = COLLECTION_LAYOUTS.get(key)
        if layout is not None and isinstance(value, list):
            row[f"{layout.prefix}Count"] = len(value)
            row[f"{layout.prefix}Summary"] = SUMMARY_SEPARATOR.join(layout.digest(item) for item in value)
        else:
            row[key] = serialize_value(value)
    return row


def profile_fields(document: Dict[str, Any]) -> Dict[str, Any]:
    """The profile's own fields, without related collections."""
    return {key: value for key, value in document.items() if key not in COLLECTION_LAYOUTS}


class ExportFileWriter:
    """
    Writes aggregated documents to a caller-supplied path.

    A failed write removes the partial file and raises SerializationError.
    An empty document list is a normal outcome and produces a valid, empty
    file in every format.
    """

    def write(
        self,
        documents: List[Dict[str, Any]],
        filepath: Union[str, Path],
        export_format: Union[ExportFormat, str],
        metadata: Optional[ExportMetadata] = None,
    ) -> int:
        """
        Write documents in the requested format.

        Args:
            documents: Aggregated youth documents
            filepath: Destination file
            export_format: json, csv or xlsx
            metadata: Export description (used by xlsx)

        Returns:
            Number of documents written
        """
        export_format = ExportFormat(export_format)
        filepath = Path(filepath)
        metadata = metadata or ExportMetadata()

        handlers = {
            ExportFormat.JSON: self._write_json,
            ExportFormat.CSV: self._write_csv,
            ExportFormat.XLSX: self._write_excel,
        }

        logger.info(
            "Writing export file",
            path=str(filepath),
            format=export_format.value,
            records=len(documents),
        )

        try:
            handlers[export_format](documents, filepath, metadata)
        except Exception as e:
            logger.error("Error during %s export: %s", export_format.value, e, exc_info=True)
            # Clean up partial file
            if filepath.exists():
                filepath.unlink()
            raise SerializationError(export_format.value, str(e)) from e

        logger.info("Export file written", path=str(filepath), records=len(documents))
        return len(documents)

    def _write_json(self, documents, filepath: Path, metadata: ExportMetadata) -> None:
        with open(filepath, "w", encoding="utf-8") as jsonfile:
            json.dump(documents, jsonfile, indent=2, default=_json_default, ensure_ascii=False)

    def _write_csv(self, documents, filepath: Path, metadata: ExportMetadata) -> None:
        rows = [flatten_document(document) for document in documents]
        columns = column_union(rows)

        with open(filepath, "w", newline="", encoding="utf-8") as csvfile:
            # No rows means no columns: an empty file reads back as zero rows
            if not columns:
                return
            writer = csv.DictWriter(csvfile, fieldnames=columns, restval="")
            writer.writeheader()
            for record_count, row in enumerate(rows, start=1):
                writer.writerow(row)
                if record_count % 10000 == 0:
                    logger.info(f"Processed {record_count} records...")
                    csvfile.flush()

    def _write_excel(self, documents, filepath: Path, metadata: ExportMetadata) -> None:
        workbook = Workbook(write_only=True)

        self._append_sheet(
            workbook,
            PROFILES_SHEET_TITLE,
            [self._profile_row(document) for document in documents],
        )

        for key, layout in COLLECTION_LAYOUTS.items():
            items = [
                {"youthId": document.get("id"), "youthName": document.get("fullName"), **item}
                for document in documents
                for item in (document.get(key) or [])
            ]
            if items:
                self._append_sheet(workbook, layout.sheet_title, items)

        self._append_metadata_sheet(workbook, metadata, len(documents))
        workbook.save(filepath)

    def _profile_row(self, document: Dict[str, Any]) -> Dict[str, Any]:
        return {key: cell_value(value) for key, value in profile_fields(document).items()}

    def _append_sheet(self, workbook: Workbook, title: str, rows: List[Dict[str, Any]]) -> None:
        sheet = workbook.create_sheet(title=title)
        columns = column_union(rows)

        for index in range(1, len(columns) + 1):
            sheet.column_dimensions[get_column_letter(index)].width = COLUMN_WIDTH

        if not columns:
            return

        sheet.append([self._header_cell(sheet, prettify_header(column)) for column in columns])
        for record_count, row in enumerate(rows, start=1):
            sheet.append([cell_value(row.get(column)) for column in columns])
            if record_count % 10000 == 0:
                logger.info(f"Processed {record_count} records...")

    def _append_metadata_sheet(self, workbook: Workbook, metadata: ExportMetadata, total: int) -> None:
        sheet = workbook.create_sheet(title=METADATA_SHEET_TITLE)
        sheet.column_dimensions["A"].width = 30
        sheet.column_dimensions["B"].width = 50

        sheet.append([self._header_cell(sheet, "Property"), self._header_cell(sheet, "Value")])
        sheet.append(["Title", metadata.title])
        sheet.append(["Export Date", metadata.generated_at.isoformat()])
        sheet.append(["Total Youth Profiles", total])
        for key, layout in COLLECTION_LAYOUTS.items():
            included = bool(metadata.include.get(key, False))
            sheet.append([f"Includes {layout.label}", "true" if included else "false"])
        if metadata.sort_by:
            sheet.append(["Sort", f"{metadata.sort_by} {metadata.sort_direction or 'asc'}"])
        sheet.append(["Applied Filters", _to_json(metadata.filters)])

    def _header_cell(self, sheet, value: str) -> WriteOnlyCell:
        """Bold header cell with a light grey fill and thin borders."""
        thin = Side(style="thin")
        cell = WriteOnlyCell(sheet, value=value)
        cell.font = Font(bold=True)
        cell.fill = PatternFill(fill_type="solid", fgColor="FFD3D3D3")
        cell.border = Border(left=thin, right=thin, top=thin, bottom=thin)
        cell.alignment = Alignment(horizontal="center", vertical="center")
        return cell
