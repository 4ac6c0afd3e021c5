from __future__ import annotations

"""Canonical product/category records and the normalizer for raw store documents.

Documents in the ``productos`` and ``categorias`` collections are written by other
tools and carry several legacy shapes (Spanish or English keys, a list of images or
a single image, stored credentials). Everything downstream works with the
dataclasses defined here and never inspects the raw shape again.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

SENSITIVE_FIELDS = ("contrasena", "contraseña", "password")
SPECS_PLACEHOLDER = "No especificado"

PRODUCT_ID_KEYS = ["id", "id_producto", "_id"]
CATEGORY_ID_KEYS = ["id_categoria", "id", "_id"]
NAME_KEYS = ["nombre", "name"]
PRICE_KEYS = ["precio", "price"]
SPECS_KEYS = ["characteristics", "caracteristicas", "specs"]
DESCRIPTION_KEYS = ["descripcion", "description"]
IMAGE_LIST_KEYS = ["imagenes", "images"]
IMAGE_KEYS = ["imagen", "image"]

PRODUCT_KEYS = set(
    PRODUCT_ID_KEYS + NAME_KEYS + PRICE_KEYS + SPECS_KEYS + IMAGE_LIST_KEYS + IMAGE_KEYS
)
CATEGORY_KEYS = set(CATEGORY_ID_KEYS + NAME_KEYS + DESCRIPTION_KEYS)


@dataclass
class Product:
    """Normalized product with the non-sensitive leftovers of the source document."""
    id: str
    name: str
    price: Optional[float]
    specs: str = SPECS_PLACEHOLDER
    images: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the store's Spanish keys; extra fields never override them."""
        payload: Dict[str, Any] = dict(self.extra)
        payload.update(
            {
                "id": self.id,
                "nombre": self.name,
                "precio": self.price,
                "specs": self.specs,
                "imagenes": list(self.images),
            }
        )
        return payload


@dataclass
class Category:
    """Normalized category record."""
    id: str
    name: str
    description: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(self.extra)
        payload.update({"id": self.id, "nombre": self.name, "descripcion": self.description})
        return payload


def normalize_product(raw: Any) -> Product:
    """Purpose: Project one raw product document into the canonical Product shape.
    Inputs/Outputs: Input is a raw document (normally a dict); output is a Product.
    Side Effects / State: None; the raw document is not mutated.
    Dependencies: Uses strip_sensitive, _get_first_value, and the *_KEYS synonym lists.
    Failure Modes: Never raises; non-dict input yields an empty product.
    If Removed: Stored credentials leak into prompts and admin output, and image
        lookups must branch on every legacy shape.
    Testing Notes: A document with only "imagen" yields images == [that value].
    """
    # Drop credentials first so nothing below can copy them into the result.
    doc = strip_sensitive(raw) if isinstance(raw, dict) else {}
    identifier = _get_first_value(doc, PRODUCT_ID_KEYS)
    name = _get_first_value(doc, NAME_KEYS)
    specs = _get_first_value(doc, SPECS_KEYS)

    return Product(
        id=_to_text(identifier),
        name=_to_text(name).strip(),
        price=_coerce_price(_get_first_value(doc, PRICE_KEYS)),
        specs=_to_text(specs).strip() if specs is not None else SPECS_PLACEHOLDER,
        images=_collect_images(doc),
        extra=_leftover_fields(doc, PRODUCT_KEYS),
    )


def normalize_category(raw: Any) -> Category:
    """Purpose: Project one raw category document into the canonical Category shape.
    Inputs/Outputs: Input is a raw document; output is a Category.
    Side Effects / State: None.
    Dependencies: Uses strip_sensitive and _get_first_value.
    Failure Modes: Never raises; missing fields become empty strings.
    If Removed: Category listings carry raw ObjectIds and credentials.
    Testing Notes: "descripcion" and "description" both populate description.
    """
    doc = strip_sensitive(raw) if isinstance(raw, dict) else {}
    return Category(
        id=_to_text(_get_first_value(doc, CATEGORY_ID_KEYS)),
        name=_to_text(_get_first_value(doc, NAME_KEYS)).strip(),
        description=_to_text(_get_first_value(doc, DESCRIPTION_KEYS)).strip(),
        extra=_leftover_fields(doc, CATEGORY_KEYS),
    )


def strip_sensitive(value: Any) -> Any:
    """Purpose: Remove credential fields from a document at any nesting depth.
    Inputs/Outputs: Input is any JSON-like value; output is a cleaned copy.
    Side Effects / State: None; returns new dicts/lists.
    Dependencies: Uses SENSITIVE_FIELDS.
    Failure Modes: None.
    If Removed: Stored passwords reach the model prompt and /admin/data.
    Testing Notes: Nested {"owner": {"password": "x"}} loses the password key.
    """
    if isinstance(value, dict):
        return {
            key: strip_sensitive(item)
            for key, item in value.items()
            if str(key).lower() not in SENSITIVE_FIELDS
        }
    if isinstance(value, list):
        return [strip_sensitive(item) for item in value]
    return value


def to_json_safe(value: Any) -> Any:
    """Convert BSON-only values (ObjectId, datetime, Decimal128) into JSON-friendly ones."""
    if isinstance(value, dict):
        return {str(key): to_json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_safe(item) for item in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _get_first_value(doc: Dict[str, Any], keys: List[str]) -> Any:
    """Return the first present, non-empty value among the synonym keys."""
    for key in keys:
        value = doc.get(key)
        if _has_value(value):
            return value
    return None


def _has_value(value: Any) -> bool:
    # Treat None, empty strings and empty lists as missing values.
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    if isinstance(value, (list, tuple)) and not value:
        return False
    return True


def _collect_images(doc: Dict[str, Any]) -> List[str]:
    """Purpose: Resolve the image list from whichever legacy image field is present.
    Inputs/Outputs: Input is a cleaned document; output is a list of URL strings.
    Side Effects / State: None.
    Dependencies: IMAGE_LIST_KEYS take priority over the singular IMAGE_KEYS
        whenever they hold at least one usable URL.
    Failure Modes: Unknown value types yield an empty list.
    If Removed: Products stored with "imagen" never show pictures.
    Testing Notes: "imagenes": "a.jpg" (a bare string) becomes ["a.jpg"].
    """
    images = _image_urls(_get_first_value(doc, IMAGE_LIST_KEYS))
    if images:
        return images
    return _image_urls(_get_first_value(doc, IMAGE_KEYS))


def _image_urls(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return []


def _coerce_price(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace("S/.", "").replace(",", "").strip())
    except ValueError:
        return None


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(to_json_safe(value))


def _leftover_fields(doc: Dict[str, Any], consumed: set) -> Dict[str, Any]:
    return {key: to_json_safe(value) for key, value in doc.items() if key not in consumed}
