from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set, Tuple

import httpx
from pydantic import ValidationError

from src.models.entities import EntityRecord
from src.models.payments import ProductLine, ProductPaymentRecord
from src.models.products import EntityKind
from src.repositories.product_payments_repository import ProductPaymentsRepository
from src.schemas.payments import ProductPayment
from src.services.entity_kinds import get_entity_kind_spec

logger = logging.getLogger(__name__)

EntityKey = Tuple[EntityKind, int]


class EntityResolver:
    def __init__(self, repository: ProductPaymentsRepository) -> None:
        self.repository = repository

    def get_by_client(self, client_id: int) -> List[ProductPayment]:
        rows = self.repository.list_by_client(client_id)
        entities = self.load_entities(rows)
        return [
            ProductPayment.from_record(row, self._entity_for(row, entities)) for row in rows
        ]

    def resolve_amounts(self, rows: Iterable[ProductPaymentRecord]) -> Dict[int, Decimal]:
        return {line.id: line.amount for line in self.resolve_lines(rows)}

    def resolve_lines(self, rows: Iterable[ProductPaymentRecord]) -> List[ProductLine]:
        rows = list(rows)
        entities = self.load_entities(rows)
        lines: List[ProductLine] = []
        for row in rows:
            amount = row.amount
            payment_date = row.payment_date
            entity = self._entity_for(row, entities)
            if row.entity_type != EntityKind.MASTER_ONLY:
                spec = get_entity_kind_spec(row.entity_type)
                amount = getattr(entity, spec.amount_field, None) if entity and spec.amount_field else None
                if payment_date is None and entity is not None and spec.date_field:
                    payment_date = getattr(entity, spec.date_field, None)
            lines.append(
                ProductLine(
                    id=row.id,
                    client_id=row.client_id,
                    product_name=row.product_name,
                    amount=amount if amount is not None else Decimal("0"),
                    payment_date=payment_date,
                    created_at=row.created_at,
                )
            )
        return lines

    def load_entities(self, rows: Iterable[ProductPaymentRecord]) -> Dict[EntityKey, EntityRecord]:
        ids_by_kind: Dict[EntityKind, Set[int]] = defaultdict(set)
        for row in rows:
            if row.entity_type == EntityKind.MASTER_ONLY or row.entity_id is None:
                continue
            ids_by_kind[row.entity_type].add(row.entity_id)

        resolved: Dict[EntityKey, EntityRecord] = {}
        for kind, entity_ids in ids_by_kind.items():
            spec = get_entity_kind_spec(kind)
            try:
                entity_rows = self.repository.list_entities(spec.table, sorted(entity_ids))
            except httpx.HTTPError as exc:
                logger.warning(
                    "Entity fetch failed kind=%s ids=%s error=%s", kind.value, sorted(entity_ids), exc
                )
                continue
            for entity_row in entity_rows:
                try:
                    record = spec.record_model.model_validate(entity_row)
                except ValidationError as exc:
                    logger.warning(
                        "Skipping unreadable entity kind=%s id=%s errors=%s",
                        kind.value,
                        entity_row.get("id"),
                        exc.error_count(),
                    )
                    continue
                resolved[(kind, record.id)] = record
        return resolved

    @staticmethod
    def _entity_for(
        row: ProductPaymentRecord, entities: Dict[EntityKey, EntityRecord]
    ) -> Optional[EntityRecord]:
        if row.entity_type == EntityKind.MASTER_ONLY or row.entity_id is None:
            return None
        return entities.get((row.entity_type, row.entity_id))
