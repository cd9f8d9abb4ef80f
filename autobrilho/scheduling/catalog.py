"""Service catalog: the offerable detailing services, with a default seed."""

import logging
from decimal import Decimal
from typing import Optional

from autobrilho.errors import ServiceNotFoundError
from autobrilho.schemas.service_schema import Service, ServiceUpdate
from autobrilho.store.base import Datastore

logger = logging.getLogger(__name__)

DEFAULT_SERVICES: list[dict] = [
    {
        "name": "Lavagem Simples",
        "description": "Lavagem externa com shampoo neutro, secagem e pretinho nos pneus.",
        "price": Decimal("40.00"),
        "duration_minutes": 30,
    },
    {
        "name": "Lavagem Completa",
        "description": "Lavagem externa e interna, aspiração, limpeza de painel e vidros.",
        "price": Decimal("80.00"),
        "duration_minutes": 60,
    },
    {
        "name": "Higienização Interna",
        "description": "Limpeza profunda de bancos, carpetes e teto com extratora.",
        "price": Decimal("180.00"),
        "duration_minutes": 60,
    },
    {
        "name": "Polimento e Enceramento",
        "description": "Polimento técnico da pintura seguido de cera de carnaúba.",
        "price": Decimal("250.00"),
        "duration_minutes": 60,
    },
]


class Catalog:
    """Read access for booking, write access for staff."""

    def __init__(self, store: Datastore) -> None:
        self._store = store

    def offerable(self) -> list[Service]:
        """Active services, cheapest first, as shown to customers."""
        return self._store.list_services(active_only=True, order_by="price")

    def all_services(self) -> list[Service]:
        """Every service including inactive ones, by name, as shown to staff."""
        return self._store.list_services(order_by="name")

    def get(self, service_id: str) -> Service:
        """Fetch a service by id.

        Raises:
            ServiceNotFoundError: If the id is unknown.
        """
        service = self._store.get_service(service_id)
        if service is None:
            raise ServiceNotFoundError(f"Service {service_id} not found.")
        return service

    def find_by_name(self, name: str) -> Optional[Service]:
        """Case-insensitive exact name match across all services."""
        normalized = name.strip().lower()
        for service in self._store.list_services():
            if service.name.lower() == normalized:
                return service
        return None

    def create(
        self,
        name: str,
        price: Decimal,
        duration_minutes: int,
        description: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> Service:
        service = self._store.add_service(Service(
            name=name,
            price=price,
            duration_minutes=duration_minutes,
            description=description,
            image_url=image_url,
        ))
        logger.info("Service created: %s (%d min)", service.name, service.duration_minutes)
        return service

    def update(self, service_id: str, changes: ServiceUpdate) -> Service:
        service = self._store.update_service(service_id, changes)
        logger.info("Service updated: %s", service_id)
        return service

    def deactivate(self, service_id: str) -> Service:
        """Hide a service from booking without deleting its history."""
        return self.update(service_id, ServiceUpdate(is_active=False))

    def seed_defaults(self) -> list[Service]:
        """Insert the default services that are not present yet, matched by name."""
        created = []
        for entry in DEFAULT_SERVICES:
            if self.find_by_name(entry["name"]) is None:
                created.append(self.create(**entry))
        if created:
            logger.info("Seeded %d catalog services", len(created))
        return created
