from __future__ import annotations

import csv
import io
from dataclasses import fields
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

import pandas as pd
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from ..common.numbers import as_float
from ..core.exceptions import NotFoundError
from ..employees.model import EmployeeProfile
from .model import SalaryCalculation, SalaryRecord

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CURRENCY_FORMAT = "#,##0"

_SKIP = {"tax_by_bracket", "calculated_at"}
CALCULATION_COLUMNS = [f.name for f in fields(SalaryCalculation) if f.name not in _SKIP]
_NON_CURRENCY = {"fullname", "working_days", "days_off", "work_days", "overtime_soon_hours",
                 "overtime_late_hours", "dependents", "is_probation", "is_vietnamese"}

PAYSLIP_LINES = (
    ("Gross salary", "gross_salary"),
    ("Effective gross", "effective_gross"),
    ("Working days", "working_days"),
    ("Days off", "days_off"),
    ("Adjusted salary", "adjusted_salary"),
    ("Overtime (x1.5) hours", "overtime_soon_hours"),
    ("Overtime (x1.8) hours", "overtime_late_hours"),
    ("Overtime pay", "total_overtime"),
    ("Food allowance", "food"),
    ("Clothes allowance", "clothes"),
    ("Parking allowance", "parking"),
    ("Fuel allowance", "fuel"),
    ("House rent allowance", "house_rent"),
    ("Phone allowance", "phone"),
    ("Total benefits", "total_benefits"),
    ("Bonus", "bonus"),
    ("Health insurance", "health_insurance"),
    ("Social insurance", "social_insurance"),
    ("Accident insurance", "accident_insurance"),
    ("Total insurance", "total_insurance"),
    ("Personal relief", "personal_relief"),
    ("Taxable income", "taxable_income"),
    ("Personal income tax", "total_tax"),
    ("Net salary", "net_salary"),
)


def _record_row(record: SalaryRecord) -> dict[str, Any]:
    c = record.calculation
    row: dict[str, Any] = {
        "id": record.record_id,
        "employee_id": record.employee_id,
        "month": record.month,
        "year": record.year,
    }
    for name in CALCULATION_COLUMNS:
        row[name] = getattr(c, name)
    for i, amount in enumerate(c.tax_by_bracket, start=1):
        row[f"tax_bracket_{i}"] = amount
    row["calculated_at"] = c.calculated_at
    return row


def salary_records_to_frame(records: Sequence[SalaryRecord]) -> pd.DataFrame:
    """One row per record, every calculated figure as its own column."""
    rows = []
    for r in records:
        row = _record_row(r)
        rows.append({k: as_float(v) if isinstance(v, Decimal) else v for k, v in row.items()})
    return pd.DataFrame(rows)


def _style_sheet(sheet, frame: pd.DataFrame) -> None:
    header_font = Font(bold=True)
    header_fill = PatternFill(start_color="DDEBF7", end_color="DDEBF7", fill_type="solid")
    for cell in sheet[1]:
        cell.font = header_font
        cell.fill = header_fill

    for idx, column in enumerate(frame.columns, start=1):
        sheet.column_dimensions[get_column_letter(idx)].width = max(12, len(str(column)) + 2)
        if column in _NON_CURRENCY or column in {"id", "employee_id", "month", "year", "calculated_at"}:
            continue
        for row in sheet.iter_rows(min_row=2, min_col=idx, max_col=idx):
            row[0].number_format = CURRENCY_FORMAT


def export_salary_workbook(records: Sequence[SalaryRecord], *, sheet_name: str = "Salary") -> bytes:
    if not records:
        raise NotFoundError("No salary records to export")

    frame = salary_records_to_frame(records)
    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        frame.to_excel(writer, index=False, sheet_name=sheet_name)
        _style_sheet(writer.sheets[sheet_name], frame)
    return out.getvalue()


def export_salary_csv(records: Sequence[SalaryRecord]) -> bytes:
    """CSV with a BOM so spreadsheet apps pick up UTF-8 names."""
    if not records:
        raise NotFoundError("No salary records to export")

    rows = [_record_row(r) for r in records]
    fieldnames: list[str] = []
    for row in rows:
        for key in row:
            if key not in fieldnames:
                fieldnames.append(key)

    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=fieldnames)
    writer.writeheader()
    for row in rows:
        writer.writerow({k: v.isoformat() if isinstance(v, datetime) else v for k, v in row.items()})
    return out.getvalue().encode("utf-8-sig")


def export_payslip_workbook(record: SalaryRecord, employee: Optional[EmployeeProfile] = None) -> bytes:
    """Single-employee payslip: header block then one label/value line per item."""
    c = record.calculation
    header = [
        ("Employee", c.fullname),
        ("Employee ID", record.employee_id),
        ("Period", f"{record.month:02d}/{record.year}"),
    ]
    if employee:
        header += [
            ("Department", employee.department or ""),
            ("Job title", employee.job_title),
            ("Bank", employee.bank_name),
            ("Account number", employee.bank_account_number),
        ]

    lines = [(label, as_float(getattr(c, name))) for label, name in PAYSLIP_LINES]
    frame = pd.DataFrame(header + [("", "")] + lines, columns=["Item", "Amount"])

    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        frame.to_excel(writer, index=False, sheet_name="Payslip")
        sheet = writer.sheets["Payslip"]
        for cell in sheet[1]:
            cell.font = Font(bold=True)
        sheet.column_dimensions["A"].width = 28
        sheet.column_dimensions["B"].width = 22
        first_amount_row = len(header) + 3
        for (amount_cell,) in sheet.iter_rows(min_row=first_amount_row, min_col=2, max_col=2):
            amount_cell.number_format = CURRENCY_FORMAT
        sheet.cell(row=sheet.max_row, column=1).font = Font(bold=True)
        sheet.cell(row=sheet.max_row, column=2).font = Font(bold=True)
    return out.getvalue()
