"""
QuickMart Traders profit/loss calculator.

Keeps the last sale transaction in memory, classifies it as profit, loss or
break-even against its purchase amount, and reports the margin as a
percentage of the purchase amount.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from threading import Lock
from typing import List, Optional, Tuple
import logging
import sys

import settings
from calculator_errors import EmptyStateError
from console_support import (
    ConsoleIO, ConsoleMenu, MenuOption, configure_logging, format_money, money_context,
    parse_decimal, parse_int, require_non_negative, require_positive,
    require_text,
)


logger = logging.getLogger(__name__)


INVOICE_REQUIRED = "Invoice No cannot be empty."
QUANTITY_INVALID = "Quantity must be greater than 0."
PURCHASE_INVALID = "Purchase Amount must be greater than 0."
SELLING_INVALID = "Selling Amount must be >= 0."
NO_TRANSACTION = "No transaction available. Please create a new transaction first."


# ==================== Enums ====================

class ProfitStatus(Enum):
    """Outcome of a sale against its purchase amount"""
    PROFIT = "PROFIT"
    LOSS = "LOSS"
    BREAK_EVEN = "BREAK-EVEN"


# ==================== Rules ====================

def validate_invoice_no(invoice_no: Optional[str]) -> str:
    return require_text(invoice_no, "invoice_no", INVOICE_REQUIRED)


def validate_quantity(quantity: int) -> int:
    return require_positive(quantity, "quantity", QUANTITY_INVALID)


def validate_purchase_amount(amount: Decimal) -> Decimal:
    return require_positive(amount, "purchase_amount", PURCHASE_INVALID)


def validate_selling_amount(amount: Decimal) -> Decimal:
    return require_non_negative(amount, "selling_amount", SELLING_INVALID)


def classify(purchase_amount: Decimal, selling_amount: Decimal) -> Tuple[ProfitStatus, Decimal]:
    """Exact comparison; the returned amount is never negative"""
    with money_context():
        if selling_amount > purchase_amount:
            return ProfitStatus.PROFIT, selling_amount - purchase_amount
        if selling_amount < purchase_amount:
            return ProfitStatus.LOSS, purchase_amount - selling_amount
    return ProfitStatus.BREAK_EVEN, Decimal('0')


def calculate_margin_percent(amount: Decimal, purchase_amount: Decimal) -> Decimal:
    """Profit or loss as a percentage of purchase, at full precision"""
    if purchase_amount == 0:
        return Decimal('0')
    with money_context():
        return (amount / purchase_amount) * settings.PERCENT


# ==================== Core Models ====================

@dataclass
class SaleTransaction:
    """A sale with its derived profit/loss figures"""
    invoice_no: str
    customer_name: str
    item_name: str
    quantity: int
    purchase_amount: Decimal
    selling_amount: Decimal
    status: ProfitStatus = field(default=ProfitStatus.BREAK_EVEN, init=False)
    profit_or_loss_amount: Decimal = field(default=Decimal('0'), init=False)
    margin_percent: Decimal = field(default=Decimal('0'), init=False)

    def __post_init__(self):
        self.recalculate()

    @classmethod
    def create(cls, invoice_no: str, customer_name: Optional[str], item_name: Optional[str],
               quantity: int, purchase_amount: Decimal,
               selling_amount: Decimal) -> 'SaleTransaction':
        """Validate the inputs and build a classified transaction"""
        invoice_no = validate_invoice_no(invoice_no)
        validate_quantity(quantity)
        validate_purchase_amount(purchase_amount)
        validate_selling_amount(selling_amount)

        return cls(
            invoice_no=invoice_no,
            customer_name=(customer_name or "").strip(),
            item_name=(item_name or "").strip(),
            quantity=quantity,
            purchase_amount=purchase_amount,
            selling_amount=selling_amount,
        )

    def recalculate(self) -> None:
        """Overwrite the derived fields from the stored amounts"""
        self.status, self.profit_or_loss_amount = classify(
            self.purchase_amount, self.selling_amount)
        self.margin_percent = calculate_margin_percent(
            self.profit_or_loss_amount, self.purchase_amount)

    def __repr__(self) -> str:
        return f"SaleTransaction({self.invoice_no}, {self.status.value})"


class TransactionCalculator:
    """Holds the most recently created sale transaction (last write wins)"""

    def __init__(self):
        self._last_transaction: Optional[SaleTransaction] = None
        self._has_last_transaction = False
        self._lock = Lock()

    def create_transaction(self, invoice_no: str, customer_name: Optional[str],
                           item_name: Optional[str], quantity: int,
                           purchase_amount: Decimal,
                           selling_amount: Decimal) -> SaleTransaction:
        """Classify a new transaction and replace the stored one"""
        transaction = SaleTransaction.create(invoice_no, customer_name, item_name,
                                             quantity, purchase_amount, selling_amount)
        with self._lock:
            self._last_transaction = transaction
            self._has_last_transaction = True
        logger.info("Created transaction %s: %s %s",
                    transaction.invoice_no, transaction.status.value,
                    transaction.profit_or_loss_amount)
        return transaction

    def view_last_transaction(self) -> SaleTransaction:
        with self._lock:
            return self._require_transaction()

    def recompute(self) -> SaleTransaction:
        """Reapply the profit/loss rules to the stored transaction in place"""
        with self._lock:
            transaction = self._require_transaction()
            transaction.recalculate()
        logger.info("Recomputed transaction %s: %s %s",
                    transaction.invoice_no, transaction.status.value,
                    transaction.profit_or_loss_amount)
        return transaction

    def has_last_transaction(self) -> bool:
        with self._lock:
            return self._has_last_transaction

    def _require_transaction(self) -> SaleTransaction:
        if not self._has_last_transaction or self._last_transaction is None:
            raise EmptyStateError(NO_TRANSACTION)
        return self._last_transaction


# ==================== Display ====================

def render_transaction(transaction: SaleTransaction) -> List[str]:
    return [
        "",
        "-------------- Last Transaction --------------",
        f"Invoice No          : {transaction.invoice_no}",
        f"Customer            : {transaction.customer_name}",
        f"Item                : {transaction.item_name}",
        f"Quantity            : {transaction.quantity}",
        f"Purchase Amount     : {format_money(transaction.purchase_amount)}",
        f"Selling Amount      : {format_money(transaction.selling_amount)}",
        f"Status              : {transaction.status.value}",
        f"Profit/Loss Amount  : {format_money(transaction.profit_or_loss_amount)}",
        f"Profit Margin (%)   : {format_money(transaction.margin_percent)}",
        "----------------------------------------------",
        "",
    ]


# ==================== Console ====================

class ProfitConsole:
    """Menu front end over a TransactionCalculator"""

    TITLE = "QuickMart Traders"

    def __init__(self, calculator: Optional[TransactionCalculator] = None,
                 io: Optional[ConsoleIO] = None):
        self._calculator = calculator or TransactionCalculator()
        self._io = io or ConsoleIO()

    def get_calculator(self) -> TransactionCalculator:
        return self._calculator

    def create_transaction(self) -> None:
        """Prompt for each field, stopping at the first invalid answer"""
        invoice_no = validate_invoice_no(self._io.ask("Enter Invoice No: "))
        customer_name = self._io.ask("Enter Customer Name: ")
        item_name = self._io.ask("Enter Item Name: ")

        quantity = validate_quantity(
            parse_int(self._io.ask("Enter Quantity: "), "quantity", QUANTITY_INVALID))
        purchase_amount = validate_purchase_amount(
            parse_decimal(self._io.ask("Enter Purchase Amount (total): "),
                          "purchase_amount", PURCHASE_INVALID))
        selling_amount = validate_selling_amount(
            parse_decimal(self._io.ask("Enter Selling Amount (total): "),
                          "selling_amount", SELLING_INVALID))

        transaction = self._calculator.create_transaction(
            invoice_no, customer_name, item_name, quantity, purchase_amount, selling_amount)
        self._print_lines(render_transaction(transaction))

    def view_last_transaction(self) -> None:
        self._print_lines(render_transaction(self._calculator.view_last_transaction()))

    def calculate_profit_or_loss(self) -> None:
        self._print_lines(render_transaction(self._calculator.recompute()))

    def build_menu(self) -> ConsoleMenu:
        return ConsoleMenu(self.TITLE, [
            MenuOption(settings.CREATE_OPTION, "Create New Transaction (Enter Purchase & Selling Details)",
                       self.create_transaction),
            MenuOption(settings.VIEW_OPTION, "View Last Transaction", self.view_last_transaction),
            MenuOption(settings.RECOMPUTE_OPTION, "Calculate Profit/Loss (Recompute & Print)",
                       self.calculate_profit_or_loss),
            MenuOption(settings.EXIT_OPTION, "Exit"),
        ], self._io)

    def run(self) -> int:
        return self.build_menu().run()

    def _print_lines(self, lines: List[str]) -> None:
        for line in lines:
            self._io.say(line)


def main() -> int:
    configure_logging()
    return ProfitConsole().run()


if __name__ == "__main__":
    sys.exit(main())
