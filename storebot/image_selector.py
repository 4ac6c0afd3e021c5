from __future__ import annotations

"""Image attachment rules for chat answers and the /images endpoint.

Two policies exist because earlier versions of the service disagreed:

- ``KEYWORD`` (default): any image/"all products" trigger attaches the
  de-duplicated images of the whole catalog, in store order, up to the cap.
- ``NAME_MATCH``: a trigger first attaches the images of products named in the
  message and falls back to the catalog-wide sample when no name matches.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from .documents import Product
from .utils import normalize_text, unique_in_order

DEFAULT_MAX_IMAGES = 12
ALL_PRODUCTS_LABEL = "todos"
MIN_NAME_TOKEN_LEN = 5

WANTS_IMAGE_RE = re.compile(
    r"\b(imagen(es)?|fotos?|fotografias?|ver|veo|muestra\w*|mostrar\w*|visual\w*|"
    r"image|images|photos?|pictures?|show|view)\b"
)
WANTS_ALL_RE = re.compile(r"\btod[oa]s?\b.*\b(productos?|lista|catalogo)\b")


class ImagePolicy(str, Enum):
    KEYWORD = "keyword"
    NAME_MATCH = "name_match"


@dataclass
class ImageSelection:
    images: List[str] = field(default_factory=list)
    attached: bool = False


def wants_image(message: str) -> bool:
    return bool(WANTS_IMAGE_RE.search(normalize_text(message)))


def wants_all(message: str) -> bool:
    return bool(WANTS_ALL_RE.search(normalize_text(message)))


def select_images(
    message: str,
    products: Sequence[Product],
    mode: ImagePolicy = ImagePolicy.KEYWORD,
    cap: int = DEFAULT_MAX_IMAGES,
) -> ImageSelection:
    """Purpose: Decide whether a chat answer carries images, and which ones.
    Inputs/Outputs: Inputs are the user's message, the aggregated products, the policy
        and the maximum image count; output is an ImageSelection.
    Side Effects / State: None.
    Dependencies: wants_image, wants_all, images_for_products, match_products_by_name.
    Failure Modes: None; products without images contribute nothing.
    If Removed: Chat answers never include pictures.
    Testing Notes: "muéstrame todos los productos" attaches the de-duplicated union of
        product images; "cuál es el horario" attaches nothing.
    """
    image_requested = wants_image(message)
    all_requested = wants_all(message)
    if not image_requested and not all_requested:
        return ImageSelection(images=[], attached=False)

    chosen: Sequence[Product] = products
    if mode == ImagePolicy.NAME_MATCH and not all_requested:
        named = match_products_by_name(message, products)
        if named:
            chosen = named
    return ImageSelection(images=images_for_products(chosen, cap), attached=True)


def collect_images(
    products: Sequence[Product],
    product_name: Optional[str] = None,
    limit: int = 10,
) -> List[str]:
    """Purpose: Images for a named product (substring match) or for the whole catalog.
    Inputs/Outputs: Inputs are products, an optional name filter and a limit; output is
        a de-duplicated list of at most ``limit`` URLs.
    Side Effects / State: None.
    Dependencies: normalize_text and images_for_products.
    Failure Modes: An unmatched name returns an empty list.
    If Removed: POST /images cannot filter by product.
    Testing Notes: "todos" behaves like no filter; matching ignores case and accents.
    """
    needle = normalize_text(product_name or "")
    if needle and needle != ALL_PRODUCTS_LABEL:
        products = [product for product in products if needle in normalize_text(product.name)]
    return images_for_products(products, limit)


def match_products_by_name(message: str, products: Sequence[Product]) -> List[Product]:
    """Products whose full name, or a distinctive word of it, appears in the message."""
    normalized_message = normalize_text(message)
    words = set(normalized_message.split())
    matched: List[Product] = []
    for product in products:
        name = normalize_text(product.name)
        if not name:
            continue
        if name in normalized_message:
            matched.append(product)
            continue
        tokens = [token for token in name.split() if len(token) >= MIN_NAME_TOKEN_LEN]
        if tokens and any(token in words for token in tokens):
            matched.append(product)
    return matched


def images_for_products(products: Iterable[Product], limit: int) -> List[str]:
    urls = unique_in_order(url for product in products for url in product.images)
    return urls[: max(limit, 0)]
