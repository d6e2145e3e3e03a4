"""Wire schema of the recognition payload.

Field names follow the Portuguese keys the recognition service emits.
"""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class OcrItem(BaseModel):
    """A single charge as returned by the service."""
    descricao: str = Field(..., description="Charge description")
    valor: Decimal = Field(..., description="Charge amount; sign is not meaningful")
    data: str = Field(..., description="Charge date (ISO, DD/MM/YYYY or DD-MM-YYYY)")


class OcrData(BaseModel):
    """Structured statement data."""
    empresa: Optional[str] = Field(None, description="Issuer name")
    cnpj: Optional[str] = Field(None, description="Issuer tax id")
    data_emissao: Optional[str] = Field(None, description="Issue date")
    data_vencimento: Optional[str] = Field(None, description="Due date")
    valor_total: Optional[Decimal] = Field(None, description="Declared statement total")
    moeda: Optional[str] = Field("BRL", description="Currency code")
    itens: List[OcrItem] = Field(default_factory=list, description="Recognized charges")


class OcrResponse(BaseModel):
    """Top-level recognition response."""
    success: bool
    document_type: Optional[str] = None
    confidence: Optional[float] = Field(None, ge=0, le=1)
    raw_text: Optional[str] = None
    data: Optional[OcrData] = None
    error: Optional[str] = None
    message: Optional[str] = None
