"""Business rule constants shared by the billing and profit consoles."""

from decimal import Decimal, ROUND_HALF_UP
import logging


# ==================== Billing Rules ====================

# Insured patients get 10% off the gross amount
INSURANCE_DISCOUNT_RATE = Decimal('0.10')

# Answer that marks a patient as insured (case-insensitive)
INSURED_ANSWER = "Y"


# ==================== Trading Rules ====================

# Quantity is read as a signed 32-bit integer
MAX_QUANTITY = 2 ** 31 - 1

PERCENT = Decimal('100')


# ==================== Amounts ====================

# Largest amount accepted at a prompt, with at most 28 fractional digits
MAX_AMOUNT = Decimal('79228162514264337593543950335')
MAX_FRACTION_DIGITS = 28

# Working precision for money arithmetic; sums of bounded amounts stay exact
MONEY_PRECISION = 64


# ==================== Display ====================

# Money and percentages are shown with two fractional digits
DISPLAY_QUANTUM = Decimal('0.01')
DISPLAY_ROUNDING = ROUND_HALF_UP


# ==================== Menu ====================

CREATE_OPTION = "1"
VIEW_OPTION = "2"
CLEAR_OPTION = "3"      # billing
RECOMPUTE_OPTION = "3"  # profit
EXIT_OPTION = "4"

OPTION_PROMPT = "Enter your option: "
EXIT_MESSAGE = "Thank you. Application closed normally."


# ==================== Logging ====================

LOG_LEVEL = logging.WARNING
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
