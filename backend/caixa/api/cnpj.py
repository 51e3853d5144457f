"""
CNPJ lookup endpoint.
"""

from fastapi import APIRouter, Depends

from caixa.dependencies import get_cnpj_client, get_current_user
from caixa.models import User
from caixa.schemas.cnpj import CnpjInfo
from caixa.services.cnpj_service import CnpjClient

router = APIRouter(prefix="/cnpj", tags=["cnpj"])


@router.get("/{cnpj}", response_model=CnpjInfo)
def lookup_cnpj(
    cnpj: str,
    user: User = Depends(get_current_user),
    client: CnpjClient = Depends(get_cnpj_client),
):
    """Fetch public registry data to prefill a company form."""
    return client.lookup(cnpj)
