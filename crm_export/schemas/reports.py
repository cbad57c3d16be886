from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# Sentinels for sales purchase prices.
NO_PURCHASE_CONTEXT = -999.0
UNUSABLE_PRICE = -1.0


class InventoryRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    warehouse: str = Field(alias="magazzino")
    code: Optional[str] = Field(default=None, alias="codice")
    category: str = Field(alias="categoria")
    brand: str = Field(alias="marca")
    type: str = Field(alias="tipologia")
    model: str = Field(alias="modello")
    color: str = Field(alias="colore")
    size: str = Field(alias="taglia")
    quantity: float = Field(alias="quantita")
    supplier: str = Field(alias="fornitore")
    purchase_price: float = Field(alias="prezzoAcquisto")
    tag_price: float = Field(alias="prezzoCartellino")
    suggested_price: float = Field(alias="prezzoSuggerito")
    affiliate_price: float = Field(alias="prezzoAffiliato")

    @property
    def total_value(self) -> float:
        return self.quantity * self.purchase_price


class SalesRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    appointment_date: Optional[str] = Field(default=None, alias="DataAppuntamento")
    atelier: Optional[str] = Field(default=None, alias="Atelier")
    employee: Optional[str] = Field(default=None, alias="Dipendente")
    client: Optional[str] = Field(default=None, alias="Cliente")
    wedding_date: Optional[str] = Field(default=None, alias="DataMatrimonio")
    category: str = Field(alias="Categoria")
    model: str = Field(alias="Modello")
    brand: str = Field(alias="Marca")
    type: str = Field(alias="Tipologia")
    size: str = Field(alias="Taglia")
    quantity: float = Field(alias="Quantita")
    sale_type: str = Field(alias="Vendita/Noleggio")
    color: str = Field(alias="Colore")
    code: Optional[str] = Field(default=None, alias="Codice_Prodotto")
    sale_price: float = Field(alias="Prezzo_Vendita")
    supplier: str = Field(alias="Fornitore")
    purchase_price: float = Field(alias="PrezzoAcquisto")
    tag_price: float = Field(alias="PrezzoCartellino")
    suggested_price: float = Field(alias="PrezzoSuggerito")
    affiliate_price: float = Field(alias="PrezzoAffiliato")


class InventoryReportOut(BaseModel):
    success: bool = True
    count: int
    data: list[InventoryRow]


class SalesReportOut(BaseModel):
    success: bool = True
    count: int
    data: list[SalesRow]


class Warehouse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str = Field(alias="_id")
    name: str = Field(alias="nome")
    location: str = Field(default="", alias="ubicazione")


class WarehouseListOut(BaseModel):
    success: bool = True
    data: list[Warehouse]
