from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping


@dataclass(frozen=True)
class StoreProfile:
    """Fixed address, location and opening hours of the physical store."""
    name: str
    location: str
    address: str
    hours: str

    def location_fields(self) -> Dict[str, str]:
        """Subset echoed back in every chat response."""
        return {"ubicacion": self.location, "direccion": self.address}

    def to_dict(self) -> Dict[str, str]:
        return {
            "nombre": self.name,
            "ubicacion": self.location,
            "direccion": self.address,
            "horario": self.hours,
        }


STORE_PROFILE = StoreProfile(
    name="Sr Robot",
    location="Huánuco",
    address=(
        "Jirón Ayacucho Huánuco 574, Huánuco, Huánuco 10000. "
        "A media cuadra del Mercado Modelo."
    ),
    hours="Lun-Sáb: 9:00 AM - 7:00 PM",
)

WARRANTIES: Mapping[str, str] = MappingProxyType(
    {
        "Pantallas de laptops": "4 meses",
        "Impresoras": "8 meses",
        "Laptops": "1 año",
        "PC (computadoras de escritorio)": "1 año",
        "Teclados": "2 meses",
        "Mouse": "2 meses",
        "Coolers": "2 meses",
        "Baterías para laptops": "3 meses",
        "Cables": "1 mes",
        "Cargadores de laptops": "1 mes",
        "Placas y otros componentes de laptops": "1 mes",
        "Otros componentes generales": "2 meses",
    }
)

WELCOME_MESSAGE = (
    "¡Hola! Soy Sr. Robot, tu asistente en Sr Robot Huánuco. Te ayudo con productos, "
    "precios en S/., imágenes y garantías. ¿Qué necesitas?"
)


def store_info() -> Dict[str, object]:
    """Location fields plus the warranty table, as exposed to the admin view."""
    return {
        "ubicacion": STORE_PROFILE.location,
        "direccion": STORE_PROFILE.address,
        "garantias": dict(WARRANTIES),
    }

