"""Service for per-company quote templates."""

from typing import Any, Dict, List

from sqlalchemy.orm import Session

from caixa.errors import raise_if_invalid
from caixa.models import Quote, QuoteTemplate
from caixa.ownership import OwnershipResolver
from caixa.sanitization import sanitize_optional, sanitize_string
from caixa.schemas.quote import QuoteTemplateCreate, QuoteTemplateUpdate
from caixa.services.base import merged
from caixa.validation import (
    collect,
    validate_hex_color,
    validate_max_length,
    validate_no_script_tags,
    validate_text,
)

DEFAULT_COLOR = "#3b82f6"
FIELDS = ("name", "header_text", "footer_text", "terms_text", "primary_color", "logo_url", "is_default")


def validate_template(data: Dict[str, Any]):
    return collect(
        validate_text(data.get("name"), "name", 100, required=True),
        validate_text(data.get("header_text"), "headerText", 500),
        validate_text(data.get("footer_text"), "footerText", 500),
        validate_text(data.get("terms_text"), "termsText", 2000),
        validate_hex_color(data.get("primary_color"), "primaryColor"),
        validate_max_length(data.get("logo_url"), 500, "logoUrl"),
        validate_no_script_tags(data.get("logo_url"), "logoUrl"),
    )


class QuoteTemplateService:
    """CRUD for quote templates. At most one template per company is the default."""

    def __init__(self, db: Session):
        self.db = db
        self.ownership = OwnershipResolver(db)

    def list_for_company(self, user_id: str, company_id: str) -> List[QuoteTemplate]:
        company = self.ownership.authorize_company(user_id, company_id)
        return self.db.query(QuoteTemplate).filter(
            QuoteTemplate.company_id == company.id
        ).order_by(QuoteTemplate.is_default.desc(), QuoteTemplate.name).all()

    def get_by_id(self, user_id: str, template_id: str) -> QuoteTemplate:
        return self.ownership.authorize_child(user_id, QuoteTemplate, template_id, "Modelo")

    def create(self, user_id: str, payload: QuoteTemplateCreate) -> QuoteTemplate:
        company = self.ownership.authorize_company(user_id, payload.company_id)

        data = payload.model_dump()
        raise_if_invalid(validate_template(data))

        template = QuoteTemplate(company_id=company.id, **self._clean(data))
        if template.is_default:
            self._clear_default(company.id)
        self.db.add(template)
        self.db.commit()
        self.db.refresh(template)
        return template

    def update(self, user_id: str, template_id: str, payload: QuoteTemplateUpdate) -> QuoteTemplate:
        template = self.get_by_id(user_id, template_id)

        current = {f: getattr(template, f) for f in FIELDS}
        data = merged(current, payload.model_dump(exclude_unset=True))
        raise_if_invalid(validate_template(data))

        cleaned = self._clean(data)
        if cleaned["is_default"] and not template.is_default:
            self._clear_default(template.company_id)
        for key, value in cleaned.items():
            setattr(template, key, value)
        self.db.commit()
        self.db.refresh(template)
        return template

    def delete(self, user_id: str, template_id: str) -> None:
        template = self.get_by_id(user_id, template_id)
        # Quotes keep their content; they just lose the template link
        self.db.query(Quote).filter(Quote.template_id == template.id).update(
            {Quote.template_id: None}, synchronize_session=False
        )
        self.db.delete(template)
        self.db.commit()

    def _clear_default(self, company_id: str) -> None:
        self.db.query(QuoteTemplate).filter(
            QuoteTemplate.company_id == company_id,
            QuoteTemplate.is_default.is_(True),
        ).update({QuoteTemplate.is_default: False}, synchronize_session=False)

    def _clean(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": sanitize_string(data["name"]),
            "header_text": sanitize_optional(data.get("header_text")),
            "footer_text": sanitize_optional(data.get("footer_text")),
            "terms_text": sanitize_optional(data.get("terms_text")),
            "primary_color": data.get("primary_color") or DEFAULT_COLOR,
            "logo_url": (data.get("logo_url") or "").strip() or None,
            "is_default": bool(data.get("is_default")),
        }
