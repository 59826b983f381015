"""Read and write cell values in .xlsx workbooks.

Only the sheets that were changed are rewritten; every other part of the
file is copied through untouched.
"""

from __future__ import annotations

import io
import math
import os
import posixpath
import re
import tempfile
import zipfile
from pathlib import Path
from xml.etree import ElementTree as ET
from xml.sax.saxutils import quoteattr

MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PKG_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
CT_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
XML_NS = "http://www.w3.org/XML/1998/namespace"

_M = f"{{{MAIN_NS}}}"
_COORD = re.compile(r"\$?([A-Za-z]{1,3})\$?([1-9][0-9]*)")
_DECLARATION = b'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'


class WorkbookError(Exception):
    """Raised when a workbook or a cell reference cannot be used."""


def _column_number(letters: str) -> int:
    number = 0
    for letter in letters.upper():
        number = number * 26 + ord(letter) - ord("A") + 1
    return number


def _column_letters(number: int) -> str:
    letters = ""
    while number:
        number, rest = divmod(number - 1, 26)
        letters = chr(ord("A") + rest) + letters
    return letters


def _parse_coord(coord: str) -> tuple[int, int]:
    match = _COORD.fullmatch(coord.strip())
    if match is None:
        raise WorkbookError(f"invalid cell coordinate: {coord!r}")
    return int(match.group(2)), _column_number(match.group(1))


def _parse_xml(data: bytes) -> tuple[ET.Element, list[tuple[str, str]]]:
    try:
        namespaces = [ns for _, ns in ET.iterparse(io.BytesIO(data), events=("start-ns",))]
        return ET.fromstring(data), namespaces
    except ET.ParseError as exc:
        raise WorkbookError(f"malformed workbook part: {exc}") from exc


def _serialize(root: ET.Element, namespaces: list[tuple[str, str]]) -> bytes:
    for prefix, uri in namespaces:
        try:
            ET.register_namespace(prefix, uri)
        except ValueError:
            pass
    text = ET.tostring(root, encoding="unicode")
    end = text.index(">")
    if text[end - 1] == "/":
        end -= 1
    head = text[:end]
    # Declarations that nothing uses (e.g. prefixes named by mc:Ignorable)
    # are dropped by the serializer; put them back on the root element.
    extra = ""
    for prefix, uri in namespaces:
        declaration = f"xmlns:{prefix}=" if prefix else "xmlns="
        if declaration not in head and declaration not in extra:
            extra += f" {declaration}{quoteattr(uri)}"
    return _DECLARATION + (head + extra + text[end:]).encode("utf-8")


def _rich_text(element: ET.Element) -> str:
    pieces = []
    for child in element:
        if child.tag == f"{_M}t":
            pieces.append(child.text or "")
        elif child.tag == f"{_M}r":
            run = child.find(f"{_M}t")
            if run is not None:
                pieces.append(run.text or "")
    return "".join(pieces)


def _format_number(value: int | float) -> str:
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"cannot store {value} in a cell")
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value)


def _rels_path(part: str) -> str:
    return posixpath.join(posixpath.dirname(part), "_rels", posixpath.basename(part) + ".rels")


def _resolve(part: str, target: str) -> str:
    if target.startswith("/"):
        return target[1:]
    return posixpath.normpath(posixpath.join(posixpath.dirname(part), target))


class Worksheet:
    """One sheet of a workbook; cells are addressed like ``B7`` or ``$B$7``."""

    def __init__(
        self,
        name: str,
        root: ET.Element,
        namespaces: list[tuple[str, str]],
        shared_strings: tuple[str, ...],
    ):
        self.name = name
        self._root = root
        self._namespaces = namespaces
        self._shared = shared_strings
        data = root.find(f"{_M}sheetData")
        if data is None:
            raise WorkbookError(f"sheet {name!r} has no cell data")
        self._data = data
        self._rows: dict[int, ET.Element] = {}
        self._cells: dict[tuple[int, int], ET.Element] = {}
        self.modified = False
        self.formula_removed = False
        self._index()

    def _index(self) -> None:
        next_row = 1
        for row in self._data.findall(f"{_M}row"):
            number = int(row.get("r") or next_row)
            row.set("r", str(number))
            self._rows[number] = row
            next_row = number + 1
            next_col = 1
            for cell in row.findall(f"{_M}c"):
                ref = cell.get("r")
                col = _parse_coord(ref)[1] if ref else next_col
                cell.set("r", f"{_column_letters(col)}{number}")
                self._cells[(number, col)] = cell
                next_col = col + 1

    def _read(self, cell: ET.Element) -> str:
        kind = cell.get("t", "n")
        if kind == "inlineStr":
            inline = cell.find(f"{_M}is")
            return "" if inline is None else _rich_text(inline)
        value = cell.find(f"{_M}v")
        text = "" if value is None or value.text is None else value.text
        if kind == "s":
            try:
                return self._shared[int(text)]
            except (ValueError, IndexError) as exc:
                raise WorkbookError(f"bad shared string in cell {cell.get('r')}") from exc
        if kind == "b":
            return "TRUE" if text.strip() == "1" else "FALSE"
        return text

    def get(self, coord: str) -> str | None:
        """Return a cell's raw value as text, or None if the cell does not exist.

        Numbers come back as they are stored, booleans as ``TRUE``/``FALSE``
        and formula cells as their last computed value.
        """
        cell = self._cells.get(_parse_coord(coord))
        return None if cell is None else self._read(cell)

    def _row(self, number: int) -> ET.Element:
        row = self._rows.get(number)
        if row is not None:
            return row
        row = ET.Element(f"{_M}row", {"r": str(number)})
        later = [r for n, r in self._rows.items() if n > number]
        if later:
            following = min(later, key=lambda r: int(r.get("r")))
            self._data.insert(list(self._data).index(following), row)
        else:
            self._data.append(row)
        self._rows[number] = row
        return row

    def _cell(self, number: int, col: int) -> ET.Element:
        cell = self._cells.get((number, col))
        if cell is not None:
            return cell
        row = self._row(number)
        row.attrib.pop("spans", None)
        cell = ET.Element(f"{_M}c", {"r": f"{_column_letters(col)}{number}"})
        later = [c for (n, k), c in self._cells.items() if n == number and k > col]
        if later:
            following = min(later, key=lambda c: _parse_coord(c.get("r"))[1])
            row.insert(list(row).index(following), cell)
        else:
            row.append(cell)
        self._cells[(number, col)] = cell
        return cell

    def set(self, coord: str, value: str | int | float) -> None:
        """Store text or a number in a cell, replacing any formula it held."""
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise TypeError(f"cells hold text or numbers, not {type(value).__name__}")
        number, col = _parse_coord(coord)
        content = None if isinstance(value, str) else _format_number(value)
        cell = self._cell(number, col)
        for child in list(cell):
            if child.tag == f"{_M}f":
                self.formula_removed = True
            if child.tag in (f"{_M}f", f"{_M}v", f"{_M}is"):
                cell.remove(child)
        if content is None:
            cell.set("t", "inlineStr")
            inline = ET.Element(f"{_M}is")
            text = ET.SubElement(inline, f"{_M}t")
            text.text = value
            if value != value.strip():
                text.set(f"{{{XML_NS}}}space", "preserve")
            cell.insert(0, inline)
        else:
            cell.attrib.pop("t", None)
            element = ET.Element(f"{_M}v")
            element.text = content
            cell.insert(0, element)
        self.modified = True

    def to_xml(self) -> bytes:
        return _serialize(self._root, self._namespaces)


class Workbook:
    """An .xlsx file held in memory."""

    def __init__(
        self,
        path: Path,
        entries: dict[str, bytes],
        sheet_parts: dict[str, str],
        shared_strings: tuple[str, ...],
        workbook_part: str,
    ):
        self.path = path
        self._entries = entries
        self._sheet_parts = sheet_parts
        self._shared = shared_strings
        self._workbook_part = workbook_part
        self._sheets: dict[str, Worksheet] = {}

    @property
    def sheet_names(self) -> list[str]:
        return list(self._sheet_parts)

    @classmethod
    def open(cls, path: str | Path) -> Workbook:
        """Read a workbook. Raises WorkbookError if it is not a usable .xlsx file."""
        path = Path(path)
        try:
            with zipfile.ZipFile(path) as archive:
                entries = {info.filename: archive.read(info) for info in archive.infolist()}
        except zipfile.BadZipFile as exc:
            raise WorkbookError(f"{path} is not an xlsx file") from exc

        workbook_part = "xl/workbook.xml"
        if "_rels/.rels" in entries:
            root, _ = _parse_xml(entries["_rels/.rels"])
            for rel in root.iter(f"{{{PKG_REL_NS}}}Relationship"):
                if rel.get("Type", "").endswith("/officeDocument"):
                    workbook_part = rel.get("Target", workbook_part).lstrip("/")
        if workbook_part not in entries:
            raise WorkbookError(f"{path} has no workbook part")

        targets: dict[str, tuple[str, str]] = {}
        rels_part = _rels_path(workbook_part)
        if rels_part in entries:
            root, _ = _parse_xml(entries[rels_part])
            for rel in root.iter(f"{{{PKG_REL_NS}}}Relationship"):
                targets[rel.get("Id", "")] = (
                    rel.get("Type", ""),
                    _resolve(workbook_part, rel.get("Target", "")),
                )

        root, _ = _parse_xml(entries[workbook_part])
        sheet_parts = {}
        for sheet in root.iter(f"{_M}sheet"):
            rel_id = sheet.get(f"{{{REL_NS}}}id", "")
            if rel_id in targets:
                sheet_parts[sheet.get("name", "")] = targets[rel_id][1]

        shared: tuple[str, ...] = ()
        for kind, target in targets.values():
            if kind.endswith("/sharedStrings") and target in entries:
                sst, _ = _parse_xml(entries[target])
                shared = tuple(_rich_text(si) for si in sst.findall(f"{_M}si"))
        return cls(path, entries, sheet_parts, shared, workbook_part)

    def sheet(self, name: str) -> Worksheet:
        """Return the sheet called ``name``."""
        if name in self._sheets:
            return self._sheets[name]
        part = self._sheet_parts.get(name)
        if part is None or part not in self._entries:
            raise WorkbookError(f"Couldn't instanciate the worksheet of name {name}")
        root, namespaces = _parse_xml(self._entries[part])
        sheet = Worksheet(name, root, namespaces, self._shared)
        self._sheets[name] = sheet
        return sheet

    def _drop_calc_chain(self, entries: dict[str, bytes]) -> None:
        rels_part = _rels_path(self._workbook_part)
        if rels_part not in entries:
            return
        root, namespaces = _parse_xml(entries[rels_part])
        dropped = []
        for rel in list(root):
            if rel.get("Type", "").endswith("/calcChain"):
                dropped.append(_resolve(self._workbook_part, rel.get("Target", "")))
                root.remove(rel)
        if not dropped:
            return
        entries[rels_part] = _serialize(root, namespaces)
        for part in dropped:
            entries.pop(part, None)
        if "[Content_Types].xml" in entries:
            types, type_namespaces = _parse_xml(entries["[Content_Types].xml"])
            for override in list(types):
                if override.get("PartName", "").lstrip("/") in dropped:
                    types.remove(override)
            entries["[Content_Types].xml"] = _serialize(types, type_namespaces)

    def save(self, path: str | Path | None = None) -> None:
        """Write the workbook to ``path``, or back to where it was read from."""
        target = Path(path) if path is not None else self.path
        entries = dict(self._entries)
        for name, sheet in self._sheets.items():
            if sheet.modified:
                entries[self._sheet_parts[name]] = sheet.to_xml()
        if any(sheet.formula_removed for sheet in self._sheets.values()):
            # The calculation chain may name cells that no longer hold formulas.
            self._drop_calc_chain(entries)

        handle, temp_name = tempfile.mkstemp(suffix=".xlsx", dir=target.parent or None)
        try:
            with os.fdopen(handle, "wb") as raw, zipfile.ZipFile(
                raw, "w", zipfile.ZIP_DEFLATED
            ) as archive:
                for name, data in entries.items():
                    archive.writestr(name, data)
            os.replace(temp_name, target)
        except BaseException:
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise
        self._entries = entries