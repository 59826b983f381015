import zipfile
from xml.etree import ElementTree as ET

import pytest

from cs2excel.workbook import MAIN_NS, Workbook, WorkbookError

CONTENT_TYPES = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
<Default Extension="xml" ContentType="application/xml"/>
<Override PartName="/xl/workbook.xml" ContentType="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet.main+xml"/>
<Override PartName="/xl/worksheets/sheet1.xml" ContentType="application/vnd.openxmlformats-officedocument.spreadsheetml.worksheet+xml"/>
<Override PartName="/xl/sharedStrings.xml" ContentType="application/vnd.openxmlformats-officedocument.spreadsheetml.sharedStrings+xml"/>
<Override PartName="/xl/calcChain.xml" ContentType="application/vnd.openxmlformats-officedocument.spreadsheetml.calcChain+xml"/>
</Types>"""

ROOT_RELS = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
<Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" Target="xl/workbook.xml"/>
</Relationships>"""

WORKBOOK = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<workbook xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main" xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships">
<sheets><sheet name="Skins" sheetId="1" r:id="rId1"/></sheets>
</workbook>"""

WORKBOOK_RELS = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
<Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/worksheet" Target="worksheets/sheet1.xml"/>
<Relationship Id="rId2" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/sharedStrings" Target="sharedStrings.xml"/>
<Relationship Id="rId3" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/calcChain" Target="calcChain.xml"/>
</Relationships>"""

SHARED = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<sst xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main" count="1" uniqueCount="1">
<si><t>https://example.com/items/a</t></si>
</sst>"""

SHEET = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<worksheet xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main" xmlns:mc="http://schemas.openxmlformats.org/markup-compatibility/2006" xmlns:x14ac="http://schemas.microsoft.com/office/spreadsheetml/2009/9/ac" mc:Ignorable="x14ac">
<sheetData>
<row r="1" spans="1:3"><c r="A1" t="s"><v>0</v></c><c r="B1"><v>3</v></c><c r="C1" t="inlineStr"><is><t>inline text</t></is></c></row>
<row r="2" spans="1:2"><c r="A2"><f>B1*2</f><v>6</v></c><c r="B2" t="b"><v>1</v></c></row>
</sheetData>
</worksheet>"""

CALC_CHAIN = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<calcChain xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main"><c r="A2" i="1"/></calcChain>"""


@pytest.fixture
def xlsx(tmp_path):
    path = tmp_path / "skins.xlsx"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("[Content_Types].xml", CONTENT_TYPES)
        archive.writestr("_rels/.rels", ROOT_RELS)
        archive.writestr("xl/workbook.xml", WORKBOOK)
        archive.writestr("xl/_rels/workbook.xml.rels", WORKBOOK_RELS)
        archive.writestr("xl/sharedStrings.xml", SHARED)
        archive.writestr("xl/worksheets/sheet1.xml", SHEET)
        archive.writestr("xl/calcChain.xml", CALC_CHAIN)
    return path


def sheet_xml(path):
    with zipfile.ZipFile(path) as archive:
        return archive.read("xl/worksheets/sheet1.xml").decode("utf-8")


def test_reads_shared_inline_and_numbers(xlsx):
    sheet = Workbook.open(xlsx).sheet("Skins")
    assert sheet.get("A1") == "https://example.com/items/a"
    assert sheet.get("B1") == "3"
    assert sheet.get("C1") == "inline text"


def test_formula_and_boolean_cells(xlsx):
    sheet = Workbook.open(xlsx).sheet("Skins")
    assert sheet.get("A2") == "6"
    assert sheet.get("B2") == "TRUE"


def test_missing_cells_are_none(xlsx):
    sheet = Workbook.open(xlsx).sheet("Skins")
    assert sheet.get("A3") is None
    assert sheet.get("Z9") is None


def test_absolute_coordinates(xlsx):
    sheet = Workbook.open(xlsx).sheet("Skins")
    assert sheet.get("$B$1") == sheet.get("b1") == "3"


@pytest.mark.parametrize("coord", ["", "11", "A0", "A", "A1B"])
def test_invalid_coordinates(xlsx, coord):
    sheet = Workbook.open(xlsx).sheet("Skins")
    with pytest.raises(WorkbookError):
        sheet.get(coord)


def test_unknown_sheet(xlsx):
    with pytest.raises(WorkbookError, match="Prices"):
        Workbook.open(xlsx).sheet("Prices")


def test_not_a_zip(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_text("not a workbook")
    with pytest.raises(WorkbookError):
        Workbook.open(path)


def test_round_trip_values(xlsx, tmp_path):
    book = Workbook.open(xlsx)
    sheet = book.sheet("Skins")
    sheet.set("B1", 7)
    sheet.set("D1", 2.5)
    sheet.set("C1", " padded ")
    sheet.set("A4", "https://example.com/items/b")
    out = tmp_path / "out.xlsx"
    book.save(out)

    again = Workbook.open(out).sheet("Skins")
    assert again.get("B1") == "7"
    assert again.get("D1") == "2.5"
    assert again.get("C1") == " padded "
    assert again.get("A4") == "https://example.com/items/b"
    assert again.get("A1") == "https://example.com/items/a"


def test_save_defaults_to_original_path(xlsx):
    book = Workbook.open(xlsx)
    book.sheet("Skins").set("E2", "written")
    book.save()
    assert Workbook.open(xlsx).sheet("Skins").get("E2") == "written"


def test_rows_and_cells_stay_ordered(xlsx):
    book = Workbook.open(xlsx)
    sheet = book.sheet("Skins")
    for coord in ("C5", "A5", "B3", "A1", "F1", "B10"):
        sheet.set(coord, 1)
    book.save()

    root = ET.fromstring(sheet_xml(xlsx))
    rows = root.findall(f"{{{MAIN_NS}}}sheetData/{{{MAIN_NS}}}row")
    numbers = [int(r.get("r")) for r in rows]
    assert numbers == sorted(numbers)
    assert len(numbers) == len(set(numbers))
    for row in rows:
        refs = [c.get("r") for c in row.findall(f"{{{MAIN_NS}}}c")]
        assert refs == sorted(refs, key=lambda ref: (len(ref.rstrip("0123456789")), ref))


def test_overwriting_formula_drops_calc_chain(xlsx):
    book = Workbook.open(xlsx)
    book.sheet("Skins").set("A2", 1)
    book.save()
    with zipfile.ZipFile(xlsx) as archive:
        assert "xl/calcChain.xml" not in archive.namelist()
        assert "calcChain" not in archive.read("xl/_rels/workbook.xml.rels").decode()
        assert "calcChain" not in archive.read("[Content_Types].xml").decode()
    assert Workbook.open(xlsx).sheet("Skins").get("A2") == "1"


def test_calc_chain_kept_without_formula_changes(xlsx):
    book = Workbook.open(xlsx)
    book.sheet("Skins").set("B1", 4)
    book.save()
    with zipfile.ZipFile(xlsx) as archive:
        assert "xl/calcChain.xml" in archive.namelist()


def test_unused_namespace_declarations_kept(xlsx):
    book = Workbook.open(xlsx)
    book.sheet("Skins").set("B1", 4)
    book.save()
    text = sheet_xml(xlsx)
    assert "xmlns:x14ac=" in text
    assert 'Ignorable="x14ac"' in text


def test_unsupported_value_type(xlsx):
    sheet = Workbook.open(xlsx).sheet("Skins")
    with pytest.raises(TypeError):
        sheet.set("A1", None)
    with pytest.raises(TypeError):
        sheet.set("A1", True)


def test_non_finite_number_rejected(xlsx):
    sheet = Workbook.open(xlsx).sheet("Skins")
    with pytest.raises(ValueError):
        sheet.set("A1", float("inf"))
    assert sheet.get("A1") == "https://example.com/items/a"