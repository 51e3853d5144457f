"""
CNPJ lookup schemas.
"""

from typing import Optional

from caixa.schemas.common import CamelModel


class CnpjInfo(CamelModel):
    """Normalized company registry data."""
    cnpj: str
    razao_social: str
    nome_fantasia: Optional[str] = None
    logradouro: Optional[str] = None
    numero: Optional[str] = None
    complemento: Optional[str] = None
    bairro: Optional[str] = None
    municipio: Optional[str] = None
    uf: Optional[str] = None
    cep: Optional[str] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    situacao: Optional[str] = None
    atividade: Optional[str] = None
