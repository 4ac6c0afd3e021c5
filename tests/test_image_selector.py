import pytest

from storebot.documents import Product, normalize_product
from storebot.image_selector import (
    ImagePolicy,
    collect_images,
    select_images,
    wants_all,
    wants_image,
)


@pytest.fixture
def products(raw_products):
    return [normalize_product(doc) for doc in raw_products]


ALL_IMAGES = [
    "https://img.example/canon.jpg",
    "https://img.example/pantalla-1.jpg",
    "https://img.example/bateria.jpg",
]


def test_all_products_request_attaches_deduplicated_union(products):
    selection = select_images("muéstrame todos los productos", products)

    assert selection.attached is True
    assert selection.images == ALL_IMAGES


def test_unrelated_question_attaches_nothing(products):
    selection = select_images("cuál es el horario", products)

    assert selection.attached is False
    assert selection.images == []


@pytest.mark.parametrize(
    "message",
    ["¿Tienes una foto de la impresora?", "Quiero ver la pantalla", "mándame imágenes", "FOTOGRAFÍA por favor"],
)
def test_image_keywords(message):
    assert wants_image(message)


@pytest.mark.parametrize(
    "message",
    ["cuál es el horario", "¿dónde están ubicados?", "precio del proveedor", "verde"],
)
def test_non_image_messages(message):
    assert not wants_image(message)


def test_all_products_pattern():
    assert wants_all("dame la lista de todos los productos")
    assert wants_all("Todos los del catálogo")
    assert not wants_all("todos ustedes son amables")


def test_cap_is_respected():
    many = [Product(id=str(i), name=f"P{i}", price=None, images=[f"https://img/{i}.jpg"]) for i in range(40)]

    selection = select_images("muestra fotos", many, cap=12)

    assert selection.attached is True
    assert len(selection.images) == 12
    assert selection.images[0] == "https://img/0.jpg"


def test_triggered_without_images_is_attached_but_empty():
    selection = select_images("muestra fotos", [Product(id="1", name="Cable", price=10.0)])

    assert selection.attached is True
    assert selection.images == []


def test_name_match_policy_prefers_named_products(products):
    selection = select_images("foto de la pantalla gamer", products, mode=ImagePolicy.NAME_MATCH)

    assert selection.images == ["https://img.example/pantalla-1.jpg", "https://img.example/canon.jpg"]


def test_name_match_policy_falls_back_to_catalog(products):
    selection = select_images("foto de un router", products, mode=ImagePolicy.NAME_MATCH)

    assert selection.images == ALL_IMAGES


def test_collect_images_by_name(products):
    assert collect_images(products, "bateria", limit=10) == ["https://img.example/bateria.jpg"]
    assert collect_images(products, "todos", limit=2) == ALL_IMAGES[:2]
    assert collect_images(products, None, limit=10) == ALL_IMAGES
    assert collect_images(products, "router", limit=10) == []
