from __future__ import annotations

import csv
import io
import math
from typing import Dict, List, Sequence

import numpy as np

Row = Dict[str, float]

XML_HEADER = '<?xml version="1.0"?>\n<?mso-application progid="Excel.Sheet"?>\n'
WORKBOOK_START = (
    '<Workbook xmlns="urn:schemas-microsoft-com:office:spreadsheet"\n'
    ' xmlns:ss="urn:schemas-microsoft-com:office:spreadsheet">\n'
    '<Worksheet ss:Name="Graph Data"><Table>\n'
)
WORKBOOK_END = '</Table></Worksheet></Workbook>'


def format_number(v: float) -> str:
    """
    Shortest round-trip text for a number, positional between 1e-6 and 1e21
    (so 5.0 -> "5", 0.00001 -> "0.00001"), exponent form outside ("1e-7").
    """
    v = float(v)
    if math.isnan(v):
        return "NaN"
    if math.isinf(v):
        return "Infinity" if v > 0 else "-Infinity"
    if v == 0:
        return "0"
    if 1e-6 <= abs(v) < 1e21:
        return np.format_float_positional(v, trim="-")
    mant, exp = repr(v).split("e")
    sign = "-" if exp.startswith("-") else "+"
    return f"{mant}e{sign}{int(exp.lstrip('+-'))}"


def _require_rows(rows: Sequence[Row]) -> None:
    if not rows:
        raise ValueError("No data to export.")


def csv_string(rows: Sequence[Row]) -> str:
    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n")
    w.writerow(["X", "Y"])
    for r in rows:
        w.writerow([format_number(r["x"]), format_number(r["y"])])
    return buf.getvalue()


def write_csv(path: str, rows: Sequence[Row]) -> None:
    _require_rows(rows)
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(csv_string(rows))


def spreadsheet_xml_string(rows: Sequence[Row]) -> str:
    """
    Minimal SpreadsheetML 2003 workbook: a String header row (X, Y) and one
    Number row per point. Excel opens it directly as .xls.
    """
    parts: List[str] = [
        '<Row><Cell><Data ss:Type="String">X</Data></Cell>'
        '<Cell><Data ss:Type="String">Y</Data></Cell></Row>\n'
    ]
    for r in rows:
        parts.append(
            f'<Row><Cell><Data ss:Type="Number">{format_number(r["x"])}</Data></Cell>'
            f'<Cell><Data ss:Type="Number">{format_number(r["y"])}</Data></Cell></Row>\n'
        )
    return XML_HEADER + WORKBOOK_START + "".join(parts) + WORKBOOK_END


def write_spreadsheet_xml(path: str, rows: Sequence[Row]) -> None:
    _require_rows(rows)
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(spreadsheet_xml_string(rows))
