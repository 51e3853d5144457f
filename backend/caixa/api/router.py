"""
Main API router.
"""

from fastapi import APIRouter
from caixa.api import auth, companies, categories, transactions, recurring, quotes, quote_templates, cnpj

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(companies.router)
api_router.include_router(categories.router)
api_router.include_router(transactions.router)
api_router.include_router(recurring.router)
api_router.include_router(quotes.router)
api_router.include_router(quote_templates.router)
api_router.include_router(cnpj.router)
