from __future__ import annotations

import io

import pytest
from openpyxl import load_workbook

from src.payroll_system.payroll_system.core.exceptions import NotFoundError
from src.payroll_system.payroll_system.payroll.export import (
    export_payslip_workbook,
    export_salary_csv,
    export_salary_workbook,
    salary_records_to_frame,
)


@pytest.fixture
def records(container, make_employee, fixed_now):
    employee = make_employee("Nguyen Van A", department="Engineering", allowances={"food": 1_000_000})
    result = container.payroll_service.calculate_batch(
        {"employee_ids": [employee.employee_id], "month": 3, "year": 2024, "working_days": 22, "days_off": 0},
        now=fixed_now,
    )
    return result.results


def test_frame_exposes_every_figure(records):
    frame = salary_records_to_frame(records)

    for column in ("gross_salary", "taxable_income", "total_tax", "net_salary", "food", "tax_bracket_1", "tax_bracket_7"):
        assert column in frame.columns
    c = records[0].calculation
    assert frame.loc[0, "net_salary"] == pytest.approx(float(c.net_salary))
    assert frame.loc[0, "health_insurance"] == pytest.approx(300000.0)


def test_workbook_has_styled_header(records):
    content = export_salary_workbook(records)

    sheet = load_workbook(io.BytesIO(content)).active
    headers = [cell.value for cell in sheet[1]]
    assert "net_salary" in headers
    assert sheet.cell(row=1, column=1).font.bold
    net_col = headers.index("net_salary") + 1
    assert sheet.cell(row=2, column=net_col).value == pytest.approx(float(records[0].calculation.net_salary))


def test_csv_has_bom_and_exact_amounts(records):
    content = export_salary_csv(records)

    assert content.startswith(b"\xef\xbb\xbf")
    text = content.decode("utf-8-sig")
    header, row = text.splitlines()[:2]
    assert "net_salary" in header.split(",")
    assert "Nguyen Van A" in row
    assert str(records[0].calculation.health_insurance) in row


def test_exports_refuse_empty_input():
    with pytest.raises(NotFoundError):
        export_salary_workbook([])
    with pytest.raises(NotFoundError):
        export_salary_csv([])


def test_payslip_lists_net_salary(records, container):
    record = records[0]
    employee = container.employee_service.get_employee(record.employee_id)

    sheet = load_workbook(io.BytesIO(export_payslip_workbook(record, employee))).active
    rows = {r[0]: r[1] for r in sheet.iter_rows(min_row=2, values_only=True) if r[0]}
    assert rows["Employee"] == "Nguyen Van A"
    assert rows["Department"] == "Engineering"
    assert rows["Period"] == "03/2024"
    assert rows["Net salary"] == pytest.approx(float(record.calculation.net_salary))
