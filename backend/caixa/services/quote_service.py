"""Service for quotes: numbering, totals, status lifecycle and comparison."""

import logging
import re
import threading
from contextlib import contextmanager
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from caixa.errors import ConflictError, ImmutableStateError, ValidationFailed, raise_if_invalid
from caixa.models import Category, DiscountType, Quote, QuoteItem, QuoteStatus, QuoteTemplate, Transaction
from caixa.ownership import OwnershipResolver, is_valid_id
from caixa.sanitization import sanitize_optional, sanitize_string
from caixa.schemas.quote import QuoteCreate, QuoteUpdate
from caixa.services.base import paginate, to_decimal
from caixa.validation import (
    FieldError,
    collect,
    validate_amount,
    validate_discount,
    validate_discount_type,
    validate_max_length,
    validate_optional_email,
    validate_quantity,
    validate_quote_status,
    validate_text,
)

logger = logging.getLogger(__name__)

VALIDITY_DAYS = 30
NUMBER_RE = re.compile(r"^ORC-(\d{4})-(\d+)$")
CENT = Decimal("0.01")

# Allowed moves of the quote state machine; EXECUTED is terminal
STATUS_TRANSITIONS = {
    QuoteStatus.DRAFT: {QuoteStatus.SENT, QuoteStatus.APPROVED, QuoteStatus.REJECTED},
    QuoteStatus.SENT: {QuoteStatus.APPROVED, QuoteStatus.REJECTED, QuoteStatus.DRAFT},
    QuoteStatus.APPROVED: {QuoteStatus.EXECUTED, QuoteStatus.SENT, QuoteStatus.REJECTED},
    QuoteStatus.REJECTED: {QuoteStatus.DRAFT, QuoteStatus.SENT},
    QuoteStatus.EXECUTED: set(),
}
# Expired quotes are the ones still waiting on the client
OPEN_STATUSES = (QuoteStatus.DRAFT, QuoteStatus.SENT)

EXECUTED_MESSAGE = "Nao e possivel editar um orcamento executado"

TEXT_LIMITS = {
    "client_name": ("clientName", 100),
    "client_phone": ("clientPhone", 30),
    "client_document": ("clientDocument", 20),
    "client_address": ("clientAddress", 300),
    "client_city": ("clientCity", 100),
    "client_zip_code": ("clientZipCode", 10),
    "title": ("title", 200),
    "description": ("description", 1000),
    "notes": ("notes", 2000),
}


class _KeyLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class QuoteNumberLocks:
    """
    Per (company, year) locks for quote numbering.

    One instance is created at startup and shared by every request. It only
    serializes numbering inside one process; the unique (company, number)
    constraint catches collisions between processes. An entry lives only while
    some request holds or waits on it, so the registry stays as small as the
    number of concurrent quote creations.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Tuple[str, int], _KeyLock] = {}

    def active(self) -> int:
        """Number of keys currently held or waited on."""
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, company_id: str, year: int) -> Iterator[None]:
        key = (company_id, year)
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[key]


def format_number(year: int, seq: int) -> str:
    return f"ORC-{year}-{seq:03d}"


def money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_total(subtotal: Decimal, discount: Decimal, discount_type: DiscountType) -> Decimal:
    if discount_type == DiscountType.PERCENT:
        total = subtotal - subtotal * discount / Decimal(100)
    else:
        total = subtotal - discount
    return max(money(total), Decimal("0.00"))


def _parse_valid_until(value: Optional[str]) -> Optional[date]:
    try:
        return date.fromisoformat(value.strip()[:10])
    except (AttributeError, ValueError):
        return None


class QuoteService:
    """Quotes of a company. EXECUTED quotes can no longer change."""

    def __init__(
        self,
        db: Session,
        locks: QuoteNumberLocks,
        today: Callable[[], date] = date.today,
    ):
        self.db = db
        self.locks = locks
        self.today = today
        self.ownership = OwnershipResolver(db)

    # Queries

    def list_for_company(
        self,
        user_id: str,
        company_id: str,
        status: Optional[str] = None,
        expired: bool = False,
        page: Any = 1,
        limit: Any = 50,
    ) -> Tuple[List[Quote], Dict[str, int]]:
        company = self.ownership.authorize_company(user_id, company_id)

        query = self.db.query(Quote).filter(Quote.company_id == company.id)
        if status:
            raise_if_invalid(collect(validate_quote_status(status)))
            query = query.filter(Quote.status == QuoteStatus(status.strip().upper()))
        if expired:
            query = query.filter(
                Quote.valid_until < self.today().isoformat(),
                Quote.status.in_(OPEN_STATUSES),
            )
        return paginate(query.order_by(Quote.created_at.desc(), Quote.number.desc()), page, limit)

    def get_by_id(self, user_id: str, quote_id: str) -> Quote:
        return self.ownership.authorize_child(user_id, Quote, quote_id, "Orçamento")

    def summary(self, user_id: str, company_id: str) -> Dict[str, Dict[str, Any]]:
        """Count and total value of a company's quotes per status."""
        company = self.ownership.authorize_company(user_id, company_id)
        rows = self.db.query(Quote.status, func.count(Quote.id), func.sum(Quote.total)).filter(
            Quote.company_id == company.id
        ).group_by(Quote.status).all()

        result = {s.value: {"count": 0, "total": 0.0} for s in QuoteStatus}
        for status, count, total in rows:
            result[status.value] = {"count": count, "total": float(total or 0)}
        return result

    # Mutations

    def create(self, user_id: str, payload: QuoteCreate) -> Quote:
        company = self.ownership.authorize_company(user_id, payload.company_id)

        data = payload.model_dump()
        data["discount_type"] = data.get("discount_type") or DiscountType.VALUE.value
        data["discount"] = data.get("discount") or 0
        raise_if_invalid(self._validate(company.id, data, require_items=True))

        quote = Quote(company_id=company.id, status=QuoteStatus.DRAFT)
        self._apply(quote, data)
        if not quote.valid_until:
            quote.valid_until = (self.today() + timedelta(days=VALIDITY_DAYS)).isoformat()

        self._insert_numbered(quote)
        logger.info("Quote %s (%s) created for company %s", quote.id, quote.number, company.id)
        return quote

    def update(self, user_id: str, quote_id: str, payload: QuoteUpdate) -> Quote:
        quote = self.get_by_id(user_id, quote_id)
        if quote.status == QuoteStatus.EXECUTED:
            raise ImmutableStateError(EXECUTED_MESSAGE)

        changes = payload.model_dump(exclude_unset=True)
        current = {
            "client_name": quote.client_name,
            "client_email": quote.client_email,
            "client_state": quote.client_state,
            "discount": float(quote.discount),
            "discount_type": quote.discount_type.value,
            "template_id": quote.template_id,
            "valid_until": quote.valid_until,
        }
        current.update({field: getattr(quote, field) for field in TEXT_LIMITS})
        data = dict(current, **changes)
        if not data.get("discount_type"):
            data["discount_type"] = DiscountType.VALUE.value
        if data.get("discount") is None:
            data["discount"] = 0
        raise_if_invalid(self._validate(quote.company_id, data, require_items="items" in changes))

        self._apply(quote, data)
        self.db.commit()
        self.db.refresh(quote)
        return quote

    def delete(self, user_id: str, quote_id: str) -> None:
        quote = self.get_by_id(user_id, quote_id)
        self.db.delete(quote)
        self.db.commit()

    def update_status(self, user_id: str, quote_id: str, status: Optional[str]) -> Quote:
        quote = self.get_by_id(user_id, quote_id)
        raise_if_invalid(collect(validate_quote_status(status)))
        target = QuoteStatus(status.strip().upper())
        current = quote.status

        if target == current:
            return quote
        if current == QuoteStatus.EXECUTED:
            raise ImmutableStateError(EXECUTED_MESSAGE)
        if target not in STATUS_TRANSITIONS[current]:
            raise ValidationFailed.single(
                "status", f"Transição de status inválida: {current.value} -> {target.value}"
            )

        values = {Quote.status: target, Quote.updated_at: datetime.utcnow()}
        if target == QuoteStatus.EXECUTED:
            values[Quote.executed_at] = datetime.utcnow()

        # Compare-and-set on the status we validated against
        updated = self.db.query(Quote).filter(
            Quote.id == quote.id, Quote.status == current
        ).update(values, synchronize_session=False)
        if not updated:
            self.db.rollback()
            raise ConflictError("O orçamento foi alterado por outra requisição", code="STALE_QUOTE")

        self.db.commit()
        self.db.refresh(quote)
        logger.info("Quote %s moved %s -> %s", quote.id, current.value, target.value)
        return quote

    def duplicate(self, user_id: str, quote_id: str) -> Quote:
        original = self.get_by_id(user_id, quote_id)

        copy = Quote(
            company_id=original.company_id,
            template_id=original.template_id,
            client_name=original.client_name,
            client_email=original.client_email,
            client_phone=original.client_phone,
            client_document=original.client_document,
            client_address=original.client_address,
            client_city=original.client_city,
            client_state=original.client_state,
            client_zip_code=original.client_zip_code,
            title=f"{original.title} (Copia)",
            description=original.description,
            notes=original.notes,
            subtotal=original.subtotal,
            discount=original.discount,
            discount_type=original.discount_type,
            total=original.total,
            status=QuoteStatus.DRAFT,
            valid_until=(self.today() + timedelta(days=VALIDITY_DAYS)).isoformat(),
        )
        copy.items = [
            QuoteItem(
                position=item.position,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total=item.total,
                category_id=item.category_id,
            )
            for item in original.items
        ]
        self._insert_numbered(copy)
        logger.info("Quote %s duplicated as %s", original.id, copy.number)
        return copy

    def comparison(self, user_id: str, quote_id: str) -> Dict[str, Any]:
        """Quoted amount per item against the company's transactions in the item's category."""
        quote = self.get_by_id(user_id, quote_id)

        category_ids = {item.category_id for item in quote.items if item.category_id}
        names = {}
        if category_ids:
            names = dict(self.db.query(Category.id, Category.name).filter(
                Category.id.in_(category_ids)
            ).all())

        items = []
        executed_total = Decimal("0.00")
        for item in quote.items:
            name = names.get(item.category_id)
            executed = Decimal("0.00")
            if name:
                executed = self.db.query(func.coalesce(func.sum(Transaction.amount), 0)).filter(
                    Transaction.company_id == quote.company_id,
                    Transaction.category == name,
                ).scalar()
                executed = Decimal(str(executed))
            executed_total += executed
            items.append({
                "description": item.description,
                "category_id": item.category_id,
                "category_name": name,
                "quoted": float(item.total),
                "executed": float(executed),
                "variance": float(item.total - executed),
            })

        quoted_total = Decimal(quote.total)
        variance = quoted_total - executed_total
        variance_percent = float(variance / quoted_total * 100) if quoted_total > 0 else 0.0
        return {
            "quote_id": quote.id,
            "quoted_total": float(quoted_total),
            "executed_total": float(executed_total),
            "variance": float(variance),
            "variance_percent": round(variance_percent, 2),
            "items": items,
        }

    # Internals

    def next_number(self, company_id: str, year: int) -> str:
        """Highest existing sequence for (company, year) plus one. Call under the lock."""
        numbers = self.db.query(Quote.number).filter(
            Quote.company_id == company_id,
            Quote.number.like(f"ORC-{year}-%"),
        ).all()

        highest = 0
        for (number,) in numbers:
            match = NUMBER_RE.match(number)
            if match:
                highest = max(highest, int(match.group(2)))
        return format_number(year, highest + 1)

    def _insert_numbered(self, quote: Quote) -> None:
        year = self.today().year
        with self.locks.hold(quote.company_id, year):
            quote.number = self.next_number(quote.company_id, year)
            self.db.add(quote)
            try:
                self.db.commit()
            except IntegrityError:
                # Another process took the number
                self.db.rollback()
                raise ConflictError(
                    "Número de orçamento já utilizado, tente novamente", code="QUOTE_NUMBER_TAKEN"
                )
        self.db.refresh(quote)

    def _validate(self, company_id: str, data: Dict[str, Any], require_items: bool):
        discount_type = data.get("discount_type")
        checks: List[Optional[FieldError]] = [
            validate_text(data.get("client_name"), "clientName", 100, required=True),
            validate_text(data.get("title"), "title", 200, required=True),
            validate_optional_email(data.get("client_email"), "clientEmail"),
            validate_max_length(data.get("client_state"), 2, "clientState"),
            validate_discount_type(discount_type),
            validate_discount(data.get("discount"), discount_type, "discount"),
        ]
        for field, (label, limit) in TEXT_LIMITS.items():
            if field not in ("client_name", "title"):
                checks.append(validate_text(data.get(field), label, limit))

        valid_until = data.get("valid_until")
        if valid_until and not _parse_valid_until(valid_until):
            checks.append(FieldError("validUntil", "Data de validade inválida (use AAAA-MM-DD)"))

        template_id = data.get("template_id")
        if template_id and not self._belongs(QuoteTemplate, template_id, company_id):
            checks.append(FieldError("templateId", "Modelo de orçamento não encontrado"))

        items = data.get("items")
        if require_items and not items:
            checks.append(FieldError("items", "O orcamento deve ter pelo menos um item"))
        for i, item in enumerate(items or []):
            checks.extend(self._validate_item(company_id, i, item))

        return collect(checks)

    def _validate_item(self, company_id: str, index: int, item: Dict[str, Any]) -> List[Optional[FieldError]]:
        prefix = f"items[{index}]"
        checks = [
            validate_text(item.get("description"), f"{prefix}.description", 200, required=True),
            validate_quantity(item.get("quantity"), f"{prefix}.quantity"),
            validate_amount(item.get("unit_price"), f"{prefix}.unitPrice"),
        ]
        category_id = item.get("category_id")
        if category_id and not self._belongs(Category, category_id, company_id):
            checks.append(FieldError(f"{prefix}.categoryId", "Categoria não encontrada"))
        return checks

    def _belongs(self, model, record_id: str, company_id: str) -> bool:
        if not is_valid_id(record_id):
            return False
        return self.db.query(model.id).filter(
            model.id == record_id.strip().lower(),
            model.company_id == company_id,
        ).first() is not None

    @staticmethod
    def _build_item(position: int, item: Dict[str, Any]) -> QuoteItem:
        quantity = to_decimal(item["quantity"], places=4)
        unit_price = to_decimal(item["unit_price"])
        return QuoteItem(
            position=position,
            description=sanitize_string(item["description"]),
            quantity=quantity,
            unit_price=unit_price,
            total=money(quantity * unit_price),
            category_id=(item.get("category_id") or "").strip().lower() or None,
        )

    def _apply(self, quote: Quote, data: Dict[str, Any]) -> None:
        """Copy validated fields onto the quote and recompute its totals."""
        for field in TEXT_LIMITS:
            setattr(quote, field, sanitize_optional(data.get(field)))
        quote.client_email = (data.get("client_email") or "").strip().lower() or None
        quote.client_state = (data.get("client_state") or "").strip().upper() or None
        quote.template_id = (data.get("template_id") or "").strip().lower() or None

        valid_until = _parse_valid_until(data.get("valid_until"))
        if valid_until:
            quote.valid_until = valid_until.isoformat()

        if data.get("items") is not None:
            quote.items = [self._build_item(i, item) for i, item in enumerate(data["items"])]

        quote.discount_type = DiscountType(data["discount_type"].strip().upper())
        quote.discount = to_decimal(data["discount"])
        quote.subtotal = money(sum((Decimal(item.total) for item in quote.items), Decimal("0.00")))
        quote.total = calculate_total(quote.subtotal, quote.discount, quote.discount_type)
