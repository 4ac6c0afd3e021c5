from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Request payload for the chat API."""
    message: str


class StoreLocation(BaseModel):
    """Location fields echoed in every chat response."""
    ubicacion: str
    direccion: str


class ChatResponse(BaseModel):
    """Response payload returned by the chat API."""
    model_config = ConfigDict(populate_by_name=True)

    response: str
    images: List[str]
    show_images: bool = Field(alias="showImages")
    store_info: StoreLocation = Field(alias="storeInfo")


class ImagesRequest(BaseModel):
    """Image lookup by product name; no name means the whole catalog."""
    model_config = ConfigDict(populate_by_name=True)

    product_name: Optional[str] = Field(default=None, alias="productName")
    limit: int = Field(default=10, ge=0)


class ImagesResponse(BaseModel):
    product: str
    images: List[str]
    total: int
    message: str


class ProductSummary(BaseModel):
    """Catalog entry for the product listing endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    nombre: str
    precio: Optional[float] = None
    imagen: Optional[str] = None
    total_imagenes: int = Field(alias="totalImagenes")


class ProductListResponse(BaseModel):
    productos: List[ProductSummary]
    total: int


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    token: str
    message: str = "Login OK"


class AdminDataResponse(BaseModel):
    """Raw aggregated data plus store info for operators."""
    data: Dict[str, List[Dict[str, Any]]]
    store_info: Dict[str, Any] = Field(alias="storeInfo")
    source: str
    timestamp: str

    model_config = ConfigDict(populate_by_name=True)
