"""
Console plumbing shared by the billing and profit calculators.

Parsing turns prompt answers into typed values and raises ValidationError on
anything that is not a plain number. The menu loop owns the read/dispatch
cycle and is the only place CalculatorError is caught.
"""

from dataclasses import dataclass
from decimal import Context, Decimal, localcontext
from typing import Callable, List, Optional, TypeVar
import logging
import re
import sys

import settings
from calculator_errors import CalculatorError, ValidationError


logger = logging.getLogger(__name__)


INVALID_NUMBER = "Invalid number entered."
MUST_BE_POSITIVE = "Value must be greater than zero."
MUST_NOT_BE_NEGATIVE = "Value cannot be negative."

# Plain or comma-grouped digits with an optional fraction; no exponent
_DECIMAL_PATTERN = re.compile(
    r'^[+-]?(?:(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d*)?|\.\d+)$'
)
_INTEGER_PATTERN = re.compile(r'^[+-]?\d+$')

Number = TypeVar('Number', int, Decimal)


def money_context():
    """Decimal context wide enough that bounded amounts add and round exactly"""
    return localcontext(Context(prec=settings.MONEY_PRECISION))


# ==================== Parsing ====================

def parse_decimal(text: Optional[str], field: str,
                  message: str = INVALID_NUMBER) -> Decimal:
    """Parse a monetary answer into an exact Decimal"""
    cleaned = (text or "").strip()
    if not _DECIMAL_PATTERN.match(cleaned):
        raise ValidationError(message, field)

    value = Decimal(cleaned.replace(",", ""))
    if (value.copy_abs() > settings.MAX_AMOUNT
            or -value.as_tuple().exponent > settings.MAX_FRACTION_DIGITS):
        raise ValidationError(message, field)
    if value.is_zero():
        # "-0" would otherwise print as -0.00
        value = value.copy_abs()
    return value


def parse_int(text: Optional[str], field: str, message: str = INVALID_NUMBER,
              max_value: int = settings.MAX_QUANTITY) -> int:
    """Parse a whole number answer, rejecting values outside the int range"""
    cleaned = (text or "").strip()
    if not _INTEGER_PATTERN.match(cleaned):
        raise ValidationError(message, field)

    value = int(cleaned)
    if value > max_value or value < -max_value - 1:
        raise ValidationError(message, field)
    return value


def parse_yes_no(text: Optional[str], yes: str = settings.INSURED_ANSWER) -> bool:
    """Only the yes answer counts; anything else is a no"""
    return (text or "").strip().upper() == yes.upper()


# ==================== Validation ====================

def require_text(value: Optional[str], field: str, message: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(message, field)
    return cleaned


def require_positive(value: Number, field: str, message: str = MUST_BE_POSITIVE) -> Number:
    if value <= 0:
        raise ValidationError(message, field)
    return value


def require_non_negative(value: Number, field: str,
                         message: str = MUST_NOT_BE_NEGATIVE) -> Number:
    if value < 0:
        raise ValidationError(message, field)
    return value


# ==================== Formatting ====================

def format_money(value: Decimal) -> str:
    """Round half-up to two places for display only"""
    with money_context():
        rounded = value.quantize(settings.DISPLAY_QUANTUM, rounding=settings.DISPLAY_ROUNDING)
    if rounded.is_zero():
        rounded = rounded.copy_abs()
    return f"{rounded:f}"


# ==================== Console I/O ====================

class ConsoleIO:
    """Line based prompt/response channel, swappable in tests"""

    def __init__(self, read_line: Callable[[str], str] = input,
                 write: Callable[[str], None] = print):
        self._read_line = read_line
        self._write = write

    def ask(self, prompt: str) -> str:
        return self._read_line(prompt)

    def say(self, text: str = "") -> None:
        self._write(text)


@dataclass
class MenuOption:
    """Numbered menu entry; an option without an action exits the loop"""
    key: str
    label: str
    action: Optional[Callable[[], None]] = None

    @property
    def is_exit(self) -> bool:
        return self.action is None


class ConsoleMenu:
    """Read-dispatch loop for a numbered text menu"""

    def __init__(self, title: str, options: List[MenuOption], io: ConsoleIO):
        if not options:
            raise ValueError("Menu needs at least one option")
        self._title = title
        self._options = {option.key: option for option in options}
        self._order = [option.key for option in options]
        self._io = io

    def render(self) -> None:
        self._io.say(f"================== {self._title} ==================")
        for key in self._order:
            self._io.say(f"{key}. {self._options[key].label}")

    def invalid_option_message(self) -> str:
        return (f"Invalid option. Please select between "
                f"{self._order[0]} and {self._order[-1]}.")

    def run(self) -> int:
        """Loop until the exit option, end of input or Ctrl-C. Returns exit code."""
        while True:
            self.render()
            try:
                choice = self._io.ask(settings.OPTION_PROMPT).strip()
            except (EOFError, KeyboardInterrupt):
                self._io.say()
                self._io.say(settings.EXIT_MESSAGE)
                return 0

            option = self._options.get(choice)
            if option is None:
                logger.warning("Unknown menu selection %r", choice)
                self._io.say(self.invalid_option_message())
                self._io.say()
                continue

            if option.is_exit:
                self._io.say(settings.EXIT_MESSAGE)
                return 0

            try:
                option.action()
            except ValidationError as e:
                logger.warning("Rejected input for %s: %s", e.field, e.message)
                self._io.say(e.message)
                self._io.say()
            except CalculatorError as e:
                self._io.say(e.message)
                self._io.say()
            except (EOFError, KeyboardInterrupt):
                # Input ended mid-prompt; nothing was stored
                self._io.say()
                self._io.say(settings.EXIT_MESSAGE)
                return 0


# ==================== Logging ====================

def configure_logging(level: int = settings.LOG_LEVEL) -> None:
    """Send diagnostics to stderr so they never mix with the menu output"""
    logging.basicConfig(level=level, format=settings.LOG_FORMAT, stream=sys.stderr)
