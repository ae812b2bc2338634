"""
Currencies accepted on rate cards and invoices.

Only the minor-unit count matters to billing: line amounts and totals are
rounded to the invoice currency's precision.  Codes outside the table are
rejected rather than guessed at.
"""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    decimal_places: int
    name: str

    @property
    def quantize_string(self) -> str:
        return "1" if self.decimal_places == 0 else "0." + "0" * self.decimal_places


# (code, minor units, name)
_TABLE: tuple[tuple[str, int, str], ...] = (
    ("AED", 2, "UAE Dirham"),
    ("SAR", 2, "Saudi Riyal"),
    ("QAR", 2, "Qatari Riyal"),
    ("BHD", 3, "Bahraini Dinar"),
    ("KWD", 3, "Kuwaiti Dinar"),
    ("OMR", 3, "Omani Rial"),
    ("JOD", 3, "Jordanian Dinar"),
    ("EGP", 2, "Egyptian Pound"),
    ("USD", 2, "US Dollar"),
    ("EUR", 2, "Euro"),
    ("GBP", 2, "Pound Sterling"),
    ("CHF", 2, "Swiss Franc"),
    ("CNY", 2, "Chinese Yuan"),
    ("INR", 2, "Indian Rupee"),
    ("PKR", 2, "Pakistani Rupee"),
    ("SGD", 2, "Singapore Dollar"),
    ("HKD", 2, "Hong Kong Dollar"),
    ("CAD", 2, "Canadian Dollar"),
    ("AUD", 2, "Australian Dollar"),
    ("JPY", 0, "Japanese Yen"),
    ("KRW", 0, "South Korean Won"),
)


def _normalize(code: object) -> str | None:
    if not isinstance(code, str):
        return None
    normalized = code.strip().upper()
    return normalized or None


class CurrencyRegistry:
    """Lookup over the supported ISO 4217 codes."""

    _BY_CODE: ClassVar[dict[str, CurrencyInfo]] = {
        code: CurrencyInfo(code, places, name) for code, places, name in _TABLE
    }

    # Precision assumed for a code that is not in the table.
    DEFAULT_DECIMAL_PLACES: ClassVar[int] = 2

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        normalized = _normalize(code)
        return cls._BY_CODE.get(normalized) if normalized else None

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return cls.get_info(code) is not None

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        info = cls.get_info(code)
        return cls.DEFAULT_DECIMAL_PLACES if info is None else info.decimal_places

    @classmethod
    def validate(cls, code: str) -> str:
        """
        Return the normalized code.

        Raises:
            ValueError: ``code`` is not a supported three-letter code.
        """
        normalized = _normalize(code)
        if normalized is None or len(normalized) != 3:
            raise ValueError(f"Currency code must be three letters: {code!r}")
        if normalized not in cls._BY_CODE:
            raise ValueError(f"Unsupported currency code: {code!r}")
        return normalized

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._BY_CODE)
