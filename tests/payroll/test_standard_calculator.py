from datetime import datetime
from decimal import Decimal

from face_attendance.payroll.calculator.standard_calculator import StandardPayrollCalculator


def test_standard_calculator_subtracts_break():
    calc = StandardPayrollCalculator()
    assert calc.worked_minutes(datetime(2024, 1, 1, 8, 0), datetime(2024, 1, 1, 17, 0), 60) == 8 * 60


def test_standard_calculator_open_day_is_zero():
    calc = StandardPayrollCalculator()
    assert calc.worked_minutes(datetime(2024, 1, 1, 8, 0), None, 0) == 0


def test_standard_calculator_never_negative():
    calc = StandardPayrollCalculator()
    assert calc.worked_minutes(datetime(2024, 1, 1, 8, 0), datetime(2024, 1, 1, 8, 30), 45) == 0


def test_deduction_rounds_half_up_to_cents():
    calc = StandardPayrollCalculator()
    # 7 / 60 * 100 = 11.666...
    assert calc.deduction(7, Decimal("100")) == Decimal("11.67")
    # 1 / 60 * 0.3 = 0.005
    assert calc.deduction(1, Decimal("0.3")) == Decimal("0.01")


def test_deduction_zero_minutes():
    assert StandardPayrollCalculator().deduction(0, Decimal("125000")) == Decimal("0.00")
