from decimal import Decimal

import pytest

import settings
from calculator_errors import EmptyStateError, ValidationError
from profit_calculator import (
    ProfitConsole, ProfitStatus, SaleTransaction, TransactionCalculator,
    calculate_margin_percent, classify, render_transaction,
)


def make_transaction(calculator, purchase="1000", selling="1250", quantity=10,
                     invoice_no="INV-1", customer="Meena Traders", item="Rice Bags"):
    return calculator.create_transaction(invoice_no, customer, item, quantity,
                                         Decimal(purchase), Decimal(selling))


@pytest.fixture
def calculator():
    return TransactionCalculator()


class TestClassification:

    def test_profit(self):
        assert classify(Decimal("1000"), Decimal("1250")) == (ProfitStatus.PROFIT, Decimal("250"))

    def test_loss(self):
        assert classify(Decimal("1000"), Decimal("800.50")) == (ProfitStatus.LOSS, Decimal("199.50"))

    def test_break_even(self):
        assert classify(Decimal("1000"), Decimal("1000.00")) == (ProfitStatus.BREAK_EVEN, Decimal("0"))

    def test_no_tolerance_on_tiny_differences(self):
        status, amount = classify(Decimal("1000"), Decimal("1000.0000001"))
        assert status is ProfitStatus.PROFIT
        assert amount == Decimal("0.0000001")

    @pytest.mark.parametrize("purchase, selling", [
        ("1", "0"), ("0.01", "0.02"), ("500", "500"), ("99.99", "100"), ("1000", "0"),
    ])
    def test_amount_never_negative(self, purchase, selling):
        status, amount = classify(Decimal(purchase), Decimal(selling))
        assert amount >= 0
        assert (amount == 0) == (status is ProfitStatus.BREAK_EVEN)

    def test_status_values(self):
        assert [s.value for s in ProfitStatus] == ["PROFIT", "LOSS", "BREAK-EVEN"]


class TestMargin:

    def test_margin_is_percentage_of_purchase(self):
        assert calculate_margin_percent(Decimal("250"), Decimal("1000")) == Decimal("25")

    def test_margin_keeps_full_precision(self):
        margin = calculate_margin_percent(Decimal("1"), Decimal("3"))
        assert margin != Decimal("33.33")
        assert margin.quantize(Decimal("0.01")) == Decimal("33.33")

    def test_zero_purchase_guard(self):
        assert calculate_margin_percent(Decimal("5"), Decimal("0")) == 0


class TestSaleTransaction:

    def test_profit_scenario(self):
        t = SaleTransaction.create("INV-1", "Meena", "Rice", 10, Decimal("1000"), Decimal("1250"))
        assert t.status is ProfitStatus.PROFIT
        assert t.profit_or_loss_amount == Decimal("250.00")
        assert t.margin_percent == Decimal("25.00")

    def test_break_even_scenario(self):
        t = SaleTransaction.create("INV-2", "Meena", "Rice", 1, Decimal("1000"), Decimal("1000"))
        assert t.status is ProfitStatus.BREAK_EVEN
        assert t.profit_or_loss_amount == Decimal("0.00")
        assert t.margin_percent == Decimal("0.00")

    def test_loss_scenario(self):
        t = SaleTransaction.create("INV-3", "", "", 2, Decimal("400"), Decimal("300"))
        assert t.status is ProfitStatus.LOSS
        assert t.profit_or_loss_amount == Decimal("100")
        assert t.margin_percent == Decimal("25")

    def test_selling_for_nothing_is_full_loss(self):
        t = SaleTransaction.create("INV-4", "", "", 1, Decimal("80"), Decimal("0"))
        assert t.status is ProfitStatus.LOSS
        assert t.margin_percent == Decimal("100")

    def test_text_fields_trimmed(self):
        t = SaleTransaction.create(" INV-5 ", " Meena ", None, 1, Decimal("1"), Decimal("1"))
        assert t.invoice_no == "INV-5"
        assert t.customer_name == "Meena"
        assert t.item_name == ""

    @pytest.mark.parametrize("invoice_no, quantity, purchase, selling, field", [
        ("", 1, "100", "100", "invoice_no"),
        ("   ", 1, "100", "100", "invoice_no"),
        ("INV-1", 0, "100", "100", "quantity"),
        ("INV-1", -3, "100", "100", "quantity"),
        ("INV-1", 1, "0", "100", "purchase_amount"),
        ("INV-1", 1, "100", "-1", "selling_amount"),
    ])
    def test_rejects_invalid_input(self, invoice_no, quantity, purchase, selling, field):
        with pytest.raises(ValidationError) as exc_info:
            SaleTransaction.create(invoice_no, "c", "i", quantity, Decimal(purchase), Decimal(selling))
        assert exc_info.value.field == field


class TestTransactionCalculator:

    def test_view_before_create_fails(self, calculator):
        with pytest.raises(EmptyStateError, match="No transaction available"):
            calculator.view_last_transaction()

    def test_recompute_before_create_fails(self, calculator):
        with pytest.raises(EmptyStateError):
            calculator.recompute()
        assert not calculator.has_last_transaction()

    def test_last_write_wins(self, calculator):
        make_transaction(calculator, invoice_no="INV-1")
        second = make_transaction(calculator, invoice_no="INV-2", selling="900")
        assert calculator.view_last_transaction() is second

    def test_failed_create_keeps_previous_transaction(self, calculator):
        first = make_transaction(calculator)
        with pytest.raises(ValidationError):
            make_transaction(calculator, quantity=0)
        assert calculator.view_last_transaction() is first

    def test_recompute_preserves_identity_and_is_idempotent(self, calculator):
        created = make_transaction(calculator, purchase="3", selling="4")
        first = calculator.recompute()
        first_values = (first.status, first.profit_or_loss_amount, first.margin_percent)
        second = calculator.recompute()
        assert created is first is second
        assert (second.status, second.profit_or_loss_amount, second.margin_percent) == first_values
        assert str(second.margin_percent) == str(first_values[2])

    def test_recompute_picks_up_changed_amounts(self, calculator):
        transaction = make_transaction(calculator)
        transaction.selling_amount = Decimal("900")
        result = calculator.recompute()
        assert result.status is ProfitStatus.LOSS
        assert result.profit_or_loss_amount == Decimal("100")
        assert result.margin_percent == Decimal("10")


def test_render_transaction_block(calculator):
    lines = render_transaction(make_transaction(calculator, purchase="1000", selling="1250"))
    assert lines[1] == "-------------- Last Transaction --------------"
    assert "Invoice No          : INV-1" in lines
    assert "Customer            : Meena Traders" in lines
    assert "Item                : Rice Bags" in lines
    assert "Quantity            : 10" in lines
    assert "Purchase Amount     : 1000.00" in lines
    assert "Selling Amount      : 1250.00" in lines
    assert "Status              : PROFIT" in lines
    assert "Profit/Loss Amount  : 250.00" in lines
    assert "Profit Margin (%)   : 25.00" in lines


class TestProfitConsole:

    def test_full_session(self, scripted_io):
        scripted_io.feed(
            "3",
            "1", "INV-7", "Meena", "Rice", "4", "1,000", "1000",
            "2",
            "3",
            "4",
        )
        console = ProfitConsole(io=scripted_io)
        assert console.run() == 0

        output = scripted_io.lines
        assert "No transaction available. Please create a new transaction first." in output
        assert output.count("Status              : BREAK-EVEN") == 3
        assert output.count("Profit Margin (%)   : 0.00") == 3
        assert output[-1] == "Thank you. Application closed normally."

    def test_prompts_in_order(self, scripted_io):
        scripted_io.feed("1", "INV-1", "c", "i", "1", "10", "12", "4")
        ProfitConsole(io=scripted_io).run()
        assert scripted_io.prompts[1:7] == [
            "Enter Invoice No: ",
            "Enter Customer Name: ",
            "Enter Item Name: ",
            "Enter Quantity: ",
            "Enter Purchase Amount (total): ",
            "Enter Selling Amount (total): ",
        ]

    @pytest.mark.parametrize("answers, message", [
        ([""], "Invoice No cannot be empty."),
        (["INV-1", "c", "i", "0"], "Quantity must be greater than 0."),
        (["INV-1", "c", "i", "two"], "Quantity must be greater than 0."),
        (["INV-1", "c", "i", "2", "0"], "Purchase Amount must be greater than 0."),
        (["INV-1", "c", "i", "2", "lots"], "Purchase Amount must be greater than 0."),
        (["INV-1", "c", "i", "2", "100", "-1"], "Selling Amount must be >= 0."),
    ])
    def test_invalid_answer_aborts_create(self, scripted_io, answers, message):
        scripted_io.feed("1", *answers)
        scripted_io.feed("4")
        console = ProfitConsole(io=scripted_io)
        assert console.run() == 0
        assert message in scripted_io.lines
        assert not console.get_calculator().has_last_transaction()

    def test_large_purchase_is_classified_and_menu_stays_ready(self, scripted_io):
        scripted_io.feed("1", "INV-9", "c", "i", "1", "1000000000000000000000000000", "1250", "3", "4")
        console = ProfitConsole(io=scripted_io)
        assert console.run() == 0
        assert scripted_io.lines.count("Purchase Amount     : 1000000000000000000000000000.00") == 2
        assert "Profit/Loss Amount  : 999999999999999999999998750.00" in scripted_io.lines
        assert "Profit Margin (%)   : 100.00" in scripted_io.lines
        assert scripted_io.lines[-1] == "Thank you. Application closed normally."

    def test_menu_keys_come_from_settings(self, scripted_io):
        ProfitConsole(io=scripted_io).build_menu().render()
        assert f"{settings.RECOMPUTE_OPTION}. Calculate Profit/Loss (Recompute & Print)" in scripted_io.lines
        assert f"{settings.EXIT_OPTION}. Exit" in scripted_io.lines

    def test_end_of_input_mid_create_exits(self, scripted_io):
        scripted_io.feed("1", "INV-1", "c")
        console = ProfitConsole(io=scripted_io)
        assert console.run() == 0
        assert not console.get_calculator().has_last_transaction()
