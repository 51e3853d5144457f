"""Client for public CNPJ registry lookups (BrasilAPI)."""

import logging
import re
from typing import Any, Dict, Optional

import httpx

from caixa.errors import BadRequestError, NotFoundError, UpstreamError

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")


def clean_cnpj(cnpj: str) -> str:
    return _NON_DIGITS.sub("", cnpj or "")


def format_cnpj(cnpj: str) -> str:
    """XX.XXX.XXX/XXXX-XX, or the input unchanged when it is not 14 digits."""
    digits = clean_cnpj(cnpj)
    if len(digits) != 14:
        return cnpj
    return f"{digits[0:2]}.{digits[2:5]}.{digits[5:8]}/{digits[8:12]}-{digits[12:14]}"


def _full_address(data: Dict[str, Any]) -> str:
    address = data.get("logradouro") or ""
    if data.get("numero"):
        address += ", " + data["numero"]
    if data.get("complemento"):
        address += " - " + data["complemento"]
    if data.get("bairro"):
        address += ", " + data["bairro"]
    return address


def normalize(data: Dict[str, Any]) -> Dict[str, Optional[str]]:
    """Map a BrasilAPI payload onto the fields the frontend uses."""
    return {
        "cnpj": format_cnpj(str(data.get("cnpj") or "")),
        "razao_social": data.get("razao_social") or "",
        "nome_fantasia": data.get("nome_fantasia") or None,
        "logradouro": _full_address(data) or None,
        "numero": data.get("numero") or None,
        "complemento": data.get("complemento") or None,
        "bairro": data.get("bairro") or None,
        "municipio": data.get("municipio") or None,
        "uf": data.get("uf") or None,
        "cep": data.get("cep") or None,
        "telefone": (data.get("ddd_telefone_1") or "").strip() or None,
        "email": data.get("email") or None,
        "situacao": data.get("descricao_situacao_cadastral") or None,
        "atividade": data.get("cnae_fiscal_descricao") or None,
    }


class CnpjClient:
    """
    Looks up company data by CNPJ.

    Every request is bounded by ``timeout`` seconds; a ``transport`` can be
    injected for tests.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def lookup(self, cnpj: str) -> Dict[str, Optional[str]]:
        digits = clean_cnpj(cnpj)
        if len(digits) != 14:
            raise BadRequestError("CNPJ invalido: deve conter 14 digitos", code="INVALID_CNPJ")

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.get(
                    f"{self.base_url}/{digits}",
                    headers={"Accept": "application/json", "User-Agent": "Caixa/1.0"},
                )
        except httpx.HTTPError as e:
            logger.warning("CNPJ lookup for %s failed: %s", digits, e)
            raise UpstreamError("Erro ao consultar CNPJ")

        if response.status_code == 404:
            raise NotFoundError("CNPJ nao encontrado")
        if response.status_code != 200:
            logger.warning("CNPJ lookup for %s returned status %d", digits, response.status_code)
            raise UpstreamError(f"Erro na API de CNPJ: status {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            raise UpstreamError("Resposta inválida da API de CNPJ")
        return normalize(data)
