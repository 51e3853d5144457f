"""Service for per-company categories and their budgets."""

from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from caixa.errors import raise_if_invalid
from caixa.models import Category, CategoryType, QuoteItem
from caixa.ownership import OwnershipResolver
from caixa.sanitization import sanitize_string
from caixa.schemas.category import CategoryCreate, CategoryUpdate
from caixa.services.base import merged, to_decimal
from caixa.validation import (
    collect,
    validate_amount_allow_zero,
    validate_category_type,
    validate_hex_color,
    validate_text,
)

DEFAULT_CATEGORIES = [
    {"name": "Salario", "type": CategoryType.INCOME, "color": "#22c55e", "budget": 0},
    {"name": "Alimentacao", "type": CategoryType.EXPENSE, "color": "#f59e0b", "budget": 1000},
    {"name": "Transporte", "type": CategoryType.EXPENSE, "color": "#3b82f6", "budget": 500},
    {"name": "Moradia", "type": CategoryType.EXPENSE, "color": "#8b5cf6", "budget": 2000},
    {"name": "Lazer", "type": CategoryType.EXPENSE, "color": "#ec4899", "budget": 300},
]


def validate_category(data: Dict[str, Any]):
    return collect(
        validate_text(data.get("name"), "name", 50, required=True),
        validate_category_type(data.get("type")),
        validate_hex_color(data.get("color")),
        validate_amount_allow_zero(data.get("budget"), "budget"),
    )


def _with_defaults(data: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(data)
    if not data.get("type"):
        data["type"] = CategoryType.EXPENSE.value
    if data.get("budget") is None:
        data["budget"] = 0
    return data


class CategoryService:
    """CRUD for categories, always through the owning company."""

    def __init__(self, db: Session):
        self.db = db
        self.ownership = OwnershipResolver(db)

    def list_for_company(
        self,
        user_id: str,
        company_id: str,
        category_type: Optional[str] = None,
    ) -> List[Category]:
        company = self.ownership.authorize_company(user_id, company_id)

        query = self.db.query(Category).filter(Category.company_id == company.id)
        if category_type:
            raise_if_invalid(collect(validate_category_type(category_type)))
            query = query.filter(Category.type == CategoryType(category_type.strip().upper()))
        return query.order_by(Category.name).all()

    def get_by_id(self, user_id: str, category_id: str) -> Category:
        return self.ownership.authorize_child(user_id, Category, category_id, "Categoria")

    def create(self, user_id: str, payload: CategoryCreate) -> Category:
        company = self.ownership.authorize_company(user_id, payload.company_id)

        data = _with_defaults(payload.model_dump())
        raise_if_invalid(validate_category(data))

        category = Category(company_id=company.id, **self._clean(data))
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def update(self, user_id: str, category_id: str, payload: CategoryUpdate) -> Category:
        category = self.get_by_id(user_id, category_id)

        current = {
            "name": category.name,
            "type": category.type.value,
            "color": category.color,
            "budget": float(category.budget),
        }
        data = _with_defaults(merged(current, payload.model_dump(exclude_unset=True)))
        raise_if_invalid(validate_category(data))

        for key, value in self._clean(data).items():
            setattr(category, key, value)
        self.db.commit()
        self.db.refresh(category)
        return category

    def delete(self, user_id: str, category_id: str) -> None:
        category = self.get_by_id(user_id, category_id)
        # Quote items tagged with it stay, untagged
        self.db.query(QuoteItem).filter(QuoteItem.category_id == category.id).update(
            {QuoteItem.category_id: None}, synchronize_session=False
        )
        self.db.delete(category)
        self.db.commit()

    def budget_summary(self, user_id: str, company_id: str) -> Dict[str, float]:
        """Total budget of a company's categories, overall and per type."""
        company = self.ownership.authorize_company(user_id, company_id)

        rows = self.db.query(Category.type, func.sum(Category.budget)).filter(
            Category.company_id == company.id
        ).group_by(Category.type).all()

        by_type = {t.value: float(total or 0) for t, total in rows}
        expense = by_type.get(CategoryType.EXPENSE.value, 0.0)
        income = by_type.get(CategoryType.INCOME.value, 0.0)
        return {"expense": expense, "income": income, "total": expense + income}

    def seed_defaults(self, user_id: str, company_id: str) -> List[Category]:
        """Create the default category set, skipping names the company already uses."""
        company = self.ownership.authorize_company(user_id, company_id)

        existing = {
            name for (name,) in self.db.query(Category.name).filter(
                Category.company_id == company.id
            )
        }
        created = []
        for default in DEFAULT_CATEGORIES:
            if default["name"] in existing:
                continue
            category = Category(
                company_id=company.id,
                name=default["name"],
                type=default["type"],
                color=default["color"],
                budget=to_decimal(default["budget"]),
            )
            self.db.add(category)
            created.append(category)
        self.db.commit()
        for category in created:
            self.db.refresh(category)
        return created

    def _clean(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": sanitize_string(data["name"]),
            "type": CategoryType(data["type"].strip().upper()),
            "color": data.get("color") or None,
            "budget": to_decimal(data["budget"]),
        }
