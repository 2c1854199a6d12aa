"""
MediSure Clinic patient billing.

Records a single patient bill at a time: three charges are summed into a
gross amount, insured patients get a flat discount, and the last bill can be
viewed or cleared from a numbered console menu.
"""

from dataclasses import dataclass
from decimal import Decimal
from threading import Lock
from typing import List, Optional
import logging
import sys

import settings
from calculator_errors import EmptyStateError
from console_support import (
    ConsoleIO, ConsoleMenu, MenuOption, configure_logging, format_money, money_context,
    parse_decimal, parse_yes_no, require_non_negative, require_positive,
    require_text,
)


logger = logging.getLogger(__name__)


BILL_ID_REQUIRED = "Bill Id cannot be empty."
NO_BILL = "No bill available. Please create a new bill first."


# ==================== Rules ====================

def validate_bill_id(bill_id: Optional[str]) -> str:
    return require_text(bill_id, "bill_id", BILL_ID_REQUIRED)


def validate_consultation_fee(fee: Decimal) -> Decimal:
    return require_positive(fee, "consultation_fee")


def validate_charge(amount: Decimal, field: str) -> Decimal:
    """Lab and medicine charges may be zero but never negative"""
    return require_non_negative(amount, field)


def calculate_discount(gross_amount: Decimal, has_insurance: bool) -> Decimal:
    """Discount on the unrounded gross; zero for uninsured patients"""
    if not has_insurance:
        return Decimal('0')
    with money_context():
        return gross_amount * settings.INSURANCE_DISCOUNT_RATE


# ==================== Core Models ====================

@dataclass(frozen=True)
class PatientBill:
    """A computed patient bill. Amounts are exact; rounding is display only."""
    bill_id: str
    patient_name: str
    has_insurance: bool
    consultation_fee: Decimal
    lab_charges: Decimal
    medicine_charges: Decimal
    gross_amount: Decimal
    discount_amount: Decimal
    final_payable: Decimal

    @classmethod
    def create(cls, bill_id: str, patient_name: Optional[str], has_insurance: bool,
               consultation_fee: Decimal, lab_charges: Decimal,
               medicine_charges: Decimal) -> 'PatientBill':
        """Validate the inputs and derive gross, discount and final payable"""
        bill_id = validate_bill_id(bill_id)
        validate_consultation_fee(consultation_fee)
        validate_charge(lab_charges, "lab_charges")
        validate_charge(medicine_charges, "medicine_charges")

        with money_context():
            gross_amount = consultation_fee + lab_charges + medicine_charges
            discount_amount = calculate_discount(gross_amount, has_insurance)
            final_payable = gross_amount - discount_amount

        return cls(
            bill_id=bill_id,
            patient_name=(patient_name or "").strip(),
            has_insurance=has_insurance,
            consultation_fee=consultation_fee,
            lab_charges=lab_charges,
            medicine_charges=medicine_charges,
            gross_amount=gross_amount,
            discount_amount=discount_amount,
            final_payable=final_payable,
        )

    def __repr__(self) -> str:
        return f"PatientBill({self.bill_id}, final={self.final_payable})"


class BillCalculator:
    """Holds the most recently created bill (last write wins)"""

    def __init__(self):
        self._last_bill: Optional[PatientBill] = None
        self._has_last_bill = False
        self._lock = Lock()

    def create_bill(self, bill_id: str, patient_name: Optional[str], has_insurance: bool,
                    consultation_fee: Decimal, lab_charges: Decimal,
                    medicine_charges: Decimal) -> PatientBill:
        """Compute a new bill and replace the stored one"""
        bill = PatientBill.create(bill_id, patient_name, has_insurance,
                                  consultation_fee, lab_charges, medicine_charges)
        with self._lock:
            self._last_bill = bill
            self._has_last_bill = True
        logger.info("Created bill %s (gross=%s, final=%s)",
                    bill.bill_id, bill.gross_amount, bill.final_payable)
        return bill

    def view_last_bill(self) -> PatientBill:
        with self._lock:
            if not self._has_last_bill or self._last_bill is None:
                raise EmptyStateError(NO_BILL)
            return self._last_bill

    def clear_last_bill(self) -> None:
        """Forget the stored bill; safe to call when nothing is stored"""
        with self._lock:
            had_bill = self._has_last_bill
            self._last_bill = None
            self._has_last_bill = False
        if had_bill:
            logger.info("Cleared last bill")

    def has_last_bill(self) -> bool:
        with self._lock:
            return self._has_last_bill


# ==================== Display ====================

def render_bill_summary(bill: PatientBill) -> List[str]:
    return [
        "",
        "Bill created successfully.",
        f"Gross Amount: {format_money(bill.gross_amount)}",
        f"Discount Amount: {format_money(bill.discount_amount)}",
        f"Final Payable: {format_money(bill.final_payable)}",
        "------------------------------------------------------------",
        "",
    ]


def render_bill(bill: PatientBill) -> List[str]:
    return [
        "",
        "----------- Last Bill -----------",
        f"BillId: {bill.bill_id}",
        f"Patient: {bill.patient_name}",
        f"Insured: {'Yes' if bill.has_insurance else 'No'}",
        f"Consultation Fee: {format_money(bill.consultation_fee)}",
        f"Lab Charges: {format_money(bill.lab_charges)}",
        f"Medicine Charges: {format_money(bill.medicine_charges)}",
        f"Gross Amount: {format_money(bill.gross_amount)}",
        f"Discount Amount: {format_money(bill.discount_amount)}",
        f"Final Payable: {format_money(bill.final_payable)}",
        "--------------------------------",
        "",
    ]


# ==================== Console ====================

class BillingConsole:
    """Menu front end over a BillCalculator"""

    TITLE = "MediSure Clinic Billing"

    def __init__(self, calculator: Optional[BillCalculator] = None,
                 io: Optional[ConsoleIO] = None):
        self._calculator = calculator or BillCalculator()
        self._io = io or ConsoleIO()

    def get_calculator(self) -> BillCalculator:
        return self._calculator

    def create_bill(self) -> None:
        """Prompt for each field, stopping at the first invalid answer"""
        bill_id = validate_bill_id(self._io.ask("Enter Bill Id: "))
        patient_name = self._io.ask("Enter Patient Name: ")
        has_insurance = parse_yes_no(self._io.ask("Is the patient insured? (Y/N): "))

        consultation_fee = validate_consultation_fee(
            parse_decimal(self._io.ask("Enter Consultation Fee: "), "consultation_fee"))
        lab_charges = validate_charge(
            parse_decimal(self._io.ask("Enter Lab Charges: "), "lab_charges"), "lab_charges")
        medicine_charges = validate_charge(
            parse_decimal(self._io.ask("Enter Medicine Charges: "), "medicine_charges"),
            "medicine_charges")

        bill = self._calculator.create_bill(bill_id, patient_name, has_insurance,
                                            consultation_fee, lab_charges, medicine_charges)
        self._print_lines(render_bill_summary(bill))

    def view_last_bill(self) -> None:
        self._print_lines(render_bill(self._calculator.view_last_bill()))

    def clear_last_bill(self) -> None:
        self._calculator.clear_last_bill()
        self._io.say("Last bill cleared.")
        self._io.say()

    def build_menu(self) -> ConsoleMenu:
        return ConsoleMenu(self.TITLE, [
            MenuOption(settings.CREATE_OPTION, "Create New Bill (Enter Patient Details)", self.create_bill),
            MenuOption(settings.VIEW_OPTION, "View Last Bill", self.view_last_bill),
            MenuOption(settings.CLEAR_OPTION, "Clear Last Bill", self.clear_last_bill),
            MenuOption(settings.EXIT_OPTION, "Exit"),
        ], self._io)

    def run(self) -> int:
        return self.build_menu().run()

    def _print_lines(self, lines: List[str]) -> None:
        for line in lines:
            self._io.say(line)


def main() -> int:
    configure_logging()
    return BillingConsole().run()


if __name__ == "__main__":
    sys.exit(main())
