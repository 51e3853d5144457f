"""
Field validation checks.

Each check takes a value and a field label and returns ``None`` when the
value is acceptable or a :class:`FieldError` describing the problem. Checks
never raise. Use :func:`collect` to gather the outcome of several checks into
a :class:`ValidationResult` that keeps every failure, not only the first.
"""

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Tuple, Union

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")
HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")

MONTHS = (
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
)
ACCUMULATED_MONTH = "Acumulado"
# Unaccented spelling older clients still send
VALID_MONTHS = frozenset(MONTHS + (ACCUMULATED_MONTH, "Marco"))

TRANSACTION_STATUSES = ("PAGO", "ABERTO")
CATEGORY_TYPES = ("EXPENSE", "INCOME")
QUOTE_STATUSES = ("DRAFT", "SENT", "APPROVED", "REJECTED", "EXECUTED")
DISCOUNT_TYPES = ("PERCENT", "VALUE")

MIN_YEAR = 2000
MAX_YEAR = 2100
MAX_AMOUNT = 999_999_999.99
MAX_QUANTITY = 999_999.9999
QUANTITY_DECIMALS = 4

Number = Union[int, float]

SCRIPT_RE = re.compile(
    r"<\s*script|<\s*iframe|javascript:|vbscript:"
    r"|on(?:error|load|click|mouseover|focus|blur|change|submit)\s*=",
    re.IGNORECASE,
)
MONGO_OPERATOR_RE = re.compile(r"\$[a-zA-Z]+")
QUERY_OBJECT_RE = re.compile(r"\{\s*[\"']?\$?\w+[\"']?\s*:")
SQL_INJECTION_RES = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\b(SELECT|INSERT|UPDATE|DELETE|DROP|CREATE|ALTER|EXEC|EXECUTE|TRUNCATE)\b",
        r"\b(UNION|OR|AND)\b.*=.*",
        r"'\s*(OR|AND)\b",
        r"--",
        r"/\*|\*/",
        r";.*\b(SELECT|INSERT|UPDATE|DELETE|DROP)\b",
        r"\bxp_\w+",
        r"\bsp_\w+",
    )
)
PATH_TRAVERSAL_RES = tuple(
    re.compile(p) for p in (r"\.\.[\\/]", r"[\\/]\.\.", r"%2e%2e", r"%252e%252e")
)


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation failure."""

    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a batch of checks: valid, or carrying every failure."""

    errors: Tuple[FieldError, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(self.errors + other.errors)


def collect(*checks: Union[Optional[FieldError], Iterable[Optional[FieldError]]]) -> ValidationResult:
    """
    Gather check outcomes into one result.

    Accepts single outcomes or iterables of outcomes (e.g. per-item checks);
    ``None`` entries are dropped.
    """
    errors = []
    for check in checks:
        if check is None:
            continue
        if isinstance(check, FieldError):
            errors.append(check)
        else:
            errors.extend(e for e in check if e is not None)
    return ValidationResult(tuple(errors))


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_finite(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _has_excess_decimals(value: Number, decimals: int) -> bool:
    # str() gives the shortest repr, so 0.1 counts as one decimal place
    exponent = Decimal(str(value)).normalize().as_tuple().exponent
    return exponent < -decimals


# ---------------------------------------------------------------------------
# Generic checks
# ---------------------------------------------------------------------------

def validate_required(value, field: str) -> Optional[FieldError]:
    if _is_blank(value):
        return FieldError(field, f"{field} não pode ser vazio")
    return None


def validate_max_length(value: Optional[str], max_length: int, field: str) -> Optional[FieldError]:
    if value is not None and len(value) > max_length:
        return FieldError(field, f"{field} deve ter no máximo {max_length} caracteres")
    return None


def validate_min_length(value: Optional[str], min_length: int, field: str) -> Optional[FieldError]:
    if value is None or len(value) < min_length:
        return FieldError(field, f"{field} deve ter no mínimo {min_length} caracteres")
    return None


def validate_max_bytes(value: Optional[str], max_bytes: int, field: str) -> Optional[FieldError]:
    """Length bound on the UTF-8 encoding, for values handed to byte-limited APIs."""
    if value is not None and len(value.encode("utf-8")) > max_bytes:
        return FieldError(field, f"{field} deve ter no máximo {max_bytes} bytes")
    return None


def validate_positive_number(value, field: str) -> Optional[FieldError]:
    if not _is_finite(value) or value <= 0:
        return FieldError(field, f"{field} deve ser maior que zero")
    return None


def validate_non_negative(value, field: str) -> Optional[FieldError]:
    if not _is_finite(value) or value < 0:
        return FieldError(field, f"{field} deve ser maior ou igual a zero")
    return None


def validate_range(value, minimum: Number, maximum: Number, field: str) -> Optional[FieldError]:
    if not _is_finite(value) or value < minimum or value > maximum:
        return FieldError(field, f"{field} deve estar entre {minimum} e {maximum}")
    return None


def validate_percentage(value, field: str) -> Optional[FieldError]:
    if not _is_finite(value) or value < 0 or value > 100:
        return FieldError(field, f"{field} deve estar entre 0 e 100")
    return None


# ---------------------------------------------------------------------------
# Domain enumerations and formats
# ---------------------------------------------------------------------------

def validate_year(year, field: str = "year") -> Optional[FieldError]:
    if not isinstance(year, int) or isinstance(year, bool) or not MIN_YEAR <= year <= MAX_YEAR:
        return FieldError(field, f"Ano deve estar entre {MIN_YEAR} e {MAX_YEAR}")
    return None


def validate_month(month: Optional[str], field: str = "month") -> Optional[FieldError]:
    if _is_blank(month):
        return FieldError(field, "Mês não pode ser vazio")
    if month not in VALID_MONTHS:
        return FieldError(
            field, "Mês inválido. Use mês em português (ex: Janeiro, Fevereiro, etc.)"
        )
    return None


def canonical_month(month: str) -> str:
    """Map accepted spellings onto the stored month name."""
    return "Março" if month == "Marco" else month


def validate_status(status: Optional[str], field: str = "status") -> Optional[FieldError]:
    if not isinstance(status, str) or status.strip().upper() not in TRANSACTION_STATUSES:
        return FieldError(field, "Status deve ser 'PAGO' ou 'ABERTO'")
    return None


def validate_category_type(category_type: Optional[str], field: str = "type") -> Optional[FieldError]:
    if not isinstance(category_type, str) or category_type.strip().upper() not in CATEGORY_TYPES:
        return FieldError(field, "Tipo deve ser 'EXPENSE' ou 'INCOME'")
    return None


def validate_quote_status(status: Optional[str], field: str = "status") -> Optional[FieldError]:
    if not isinstance(status, str) or status.strip().upper() not in QUOTE_STATUSES:
        return FieldError(
            field, "Status inválido. Use DRAFT, SENT, APPROVED, REJECTED ou EXECUTED"
        )
    return None


def validate_discount_type(discount_type: Optional[str], field: str = "discountType") -> Optional[FieldError]:
    if not isinstance(discount_type, str) or discount_type.strip().upper() not in DISCOUNT_TYPES:
        return FieldError(field, "Tipo de desconto deve ser 'PERCENT' ou 'VALUE'")
    return None


def validate_hex_color(color: Optional[str], field: str = "color") -> Optional[FieldError]:
    """Empty colors are allowed; anything else must be ``#RRGGBB``."""
    if not color:
        return None
    if not HEX_COLOR_RE.match(color):
        return FieldError(field, "Cor deve estar no formato hexadecimal #RRGGBB (ex: #FF5733)")
    return None


def validate_day_of_month(day, field: str = "dayOfMonth") -> Optional[FieldError]:
    if not isinstance(day, int) or isinstance(day, bool) or validate_range(day, 1, 31, field):
        return FieldError(field, "Dia do mês deve estar entre 1 e 31")
    return None


def validate_email(email: Optional[str], field: str = "email") -> Optional[FieldError]:
    if _is_blank(email):
        return FieldError(field, "Email não pode ser vazio")
    if not EMAIL_RE.match(email.strip()):
        return FieldError(field, "Formato de email inválido")
    return None


def validate_optional_email(email: Optional[str], field: str = "email") -> Optional[FieldError]:
    if _is_blank(email):
        return None
    return validate_email(email, field)


def validate_cnpj(cnpj: Optional[str], field: str = "cnpj") -> Optional[FieldError]:
    """Optional; when present must hold 14 digits once punctuation is stripped."""
    if _is_blank(cnpj):
        return None
    if len(re.sub(r"\D", "", cnpj)) != 14:
        return FieldError(field, "CNPJ deve conter 14 dígitos")
    return None


# ---------------------------------------------------------------------------
# Money and quantities
# ---------------------------------------------------------------------------

def validate_amount(value, field: str = "amount") -> Optional[FieldError]:
    if not _is_finite(value):
        return FieldError(field, f"{field} contem um valor numerico invalido")
    if value <= 0:
        return validate_positive_number(value, field)
    if value > MAX_AMOUNT:
        return FieldError(field, f"{field} excede o valor maximo permitido de R$ 999.999.999,99")
    if _has_excess_decimals(value, 2):
        return FieldError(field, f"{field} deve ter no maximo 2 casas decimais")
    return None


def validate_amount_allow_zero(value, field: str = "budget") -> Optional[FieldError]:
    if not _is_finite(value):
        return FieldError(field, f"{field} contem um valor numerico invalido")
    if value < 0:
        return validate_non_negative(value, field)
    if value > MAX_AMOUNT:
        return FieldError(field, f"{field} excede o valor maximo permitido de R$ 999.999.999,99")
    if _has_excess_decimals(value, 2):
        return FieldError(field, f"{field} deve ter no maximo 2 casas decimais")
    return None


def validate_quantity(value, field: str = "quantity") -> Optional[FieldError]:
    if not _is_finite(value):
        return FieldError(field, f"{field} contem um valor numerico invalido")
    if value <= 0:
        return validate_positive_number(value, field)
    if value > MAX_QUANTITY:
        return FieldError(field, f"{field} excede o valor maximo permitido")
    if _has_excess_decimals(value, QUANTITY_DECIMALS):
        return FieldError(field, f"{field} deve ter no maximo {QUANTITY_DECIMALS} casas decimais")
    return None


def validate_discount(value, discount_type: str, field: str = "discount") -> Optional[FieldError]:
    if not _is_finite(value):
        return FieldError(field, f"{field} contem um valor numerico invalido")
    if value < 0:
        return validate_non_negative(value, field)
    if (discount_type or "").upper() == "PERCENT":
        if value > 100:
            return validate_percentage(value, field)
    elif value > MAX_AMOUNT:
        return FieldError(field, f"{field} excede o valor maximo permitido de R$ 999.999.999,99")
    if _has_excess_decimals(value, 2):
        return FieldError(field, f"{field} deve ter no maximo 2 casas decimais")
    return None


# ---------------------------------------------------------------------------
# Injection guards for free text
# ---------------------------------------------------------------------------

def validate_no_script_tags(value: Optional[str], field: str) -> Optional[FieldError]:
    if value and SCRIPT_RE.search(value):
        return FieldError(field, "Conteúdo contém código não permitido")
    return None


def validate_no_mongo_operators(value: Optional[str], field: str) -> Optional[FieldError]:
    if value and (MONGO_OPERATOR_RE.search(value) or QUERY_OBJECT_RE.search(value)):
        return FieldError(field, "Operadores não permitidos detectados")
    return None


def validate_no_sql_injection(value: Optional[str], field: str) -> Optional[FieldError]:
    if value and any(p.search(value) for p in SQL_INJECTION_RES):
        return FieldError(field, "Conteúdo contém caracteres não permitidos")
    return None


def validate_no_path_traversal(value: Optional[str], field: str) -> Optional[FieldError]:
    if value and any(p.search(value.lower()) for p in PATH_TRAVERSAL_RES):
        return FieldError(field, "Caminho inválido detectado")
    return None


def validate_free_text(value: Optional[str], field: str) -> Optional[FieldError]:
    """Run every injection guard; report the first one that trips."""
    return (
        validate_no_script_tags(value, field)
        or validate_no_mongo_operators(value, field)
        or validate_no_sql_injection(value, field)
    )


def validate_text(
    value: Optional[str],
    field: str,
    max_length: int,
    required: bool = False,
) -> Optional[FieldError]:
    """Required/length/injection checks for one free-text field, first failure wins."""
    if required:
        missing = validate_required(value, field)
        if missing:
            return missing
    if not value:
        return None
    return validate_max_length(value, max_length, field) or validate_free_text(value, field)
