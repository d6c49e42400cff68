"""Generic ownership-scoped CRUD.

Quotes, jobs, properties, customers and employees are all "rows that
belong to (at most) one customer". ResourceRepository holds the logic
they share; each entity is a small subclass that only declares:

- model / label            which table, and what to call it in errors
- owner_column             the ownership key (customer_id, or id for users)
- required_fields          checked on create — missing or empty is a 400
- updatable_fields         whitelist for update; everything else is ignored
- *_roles                  who may create / delete / change status
- workflow                 StatusWorkflow for entities with a status field

Scoping rules:
- customers see and touch only rows whose owner_column is their own id
- employees and managers see everything

Each operation touches exactly one row and commits once.
"""

from typing import Any, Generic, Iterable, Optional, TypeVar

import structlog
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from declutter.auth.dependencies import CurrentUser, ensure_role
from declutter.db.models import STAFF_ROLES, Base
from declutter.errors import AuthorizationError, NotFoundError, ValidationError
from declutter.services.workflow import StatusWorkflow

logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=Base)

ANYONE = None  # role gate disabled (any authenticated caller)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


class ResourceRepository(Generic[ModelT]):
    """Base class for one entity's CRUD."""

    model: type[ModelT]
    label: str = "Resource"
    owner_column: str = "customer_id"
    required_fields: tuple[str, ...] = ()
    updatable_fields: tuple[str, ...] = ()
    create_roles: Optional[tuple[str, ...]] = ANYONE
    delete_roles: Optional[tuple[str, ...]] = ANYONE
    status_roles: tuple[str, ...] = STAFF_ROLES
    workflow: Optional[StatusWorkflow] = None

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Scoping ────────────────────────────────────────

    def base_query(self) -> Select:
        """Unscoped SELECT for this entity. Subclasses narrow it (e.g. by role)."""
        return select(self.model)

    def owner_of(self, row: ModelT) -> Optional[int]:
        return getattr(row, self.owner_column)

    def scoped_query(self, caller: CurrentUser) -> Select:
        query = self.base_query()
        if caller.is_customer:
            query = query.where(getattr(self.model, self.owner_column) == caller.id)
        return query

    def check_owner(self, caller: CurrentUser, row: ModelT) -> None:
        if caller.is_customer and self.owner_of(row) != caller.id:
            raise AuthorizationError("Unauthorized")

    def check_roles(
        self, caller: Optional[CurrentUser], roles: Optional[Iterable[str]]
    ) -> None:
        if roles is ANYONE:
            return
        if caller is None:
            raise AuthorizationError("Insufficient permissions")
        ensure_role(caller, roles)

    # ─── Read ───────────────────────────────────────────

    async def list(self, caller: CurrentUser, **filters: Any) -> list[ModelT]:
        """All rows for staff, owned rows for customers.

        Keyword filters are equality filters on columns; None values are
        skipped so routes can pass optional query params straight through.
        """
        query = self.scoped_query(caller).order_by(self.model.id.desc())
        for column, value in filters.items():
            if value is None:
                continue
            if column == self.owner_column and caller.is_customer and value != caller.id:
                raise AuthorizationError("Unauthorized")
            query = query.where(getattr(self.model, column) == value)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def load(self, row_id: int) -> ModelT:
        """Fetch a row without any ownership check, or raise NotFoundError."""
        result = await self.db.execute(
            self.base_query().where(self.model.id == row_id)
        )
        row = result.scalars().first()
        if row is None:
            raise NotFoundError(f"{self.label} not found")
        return row

    async def get(self, caller: CurrentUser, row_id: int) -> ModelT:
        row = await self.load(row_id)
        self.check_owner(caller, row)
        return row

    # ─── Create ─────────────────────────────────────────

    def check_required(self, fields: dict[str, Any]) -> None:
        for name in self.required_fields:
            if _is_empty(fields.get(name)):
                raise ValidationError(f"Field '{name}' is required")

    def prepare_create(
        self, caller: Optional[CurrentUser], fields: dict[str, Any]
    ) -> dict[str, Any]:
        """Hook to fill server-side values before validation."""
        return fields

    async def check_references(
        self, fields: dict[str, Any], row: Optional[ModelT] = None
    ) -> None:
        """Hook to validate foreign keys before anything is written.

        `row` is the existing row on update, None on create.
        """

    async def create(
        self, caller: Optional[CurrentUser], fields: dict[str, Any]
    ) -> ModelT:
        self.check_roles(caller, self.create_roles)
        fields = self.prepare_create(caller, dict(fields))
        self.check_required(fields)
        await self.check_references(fields)

        columns = {
            name: value
            for name, value in fields.items()
            if hasattr(self.model, name) and name not in ("id", "status")
        }
        row = self.model(**columns)
        if self.workflow is not None:
            row.status = self.workflow.initial

        self.db.add(row)
        await self.db.commit()
        logger.info(
            f"{self.label.lower()}.created",
            id=row.id,
            by=caller.id if caller else None,
        )
        return row

    # ─── Update ─────────────────────────────────────────

    def pick_updates(self, fields: dict[str, Any]) -> dict[str, Any]:
        return {
            name: value
            for name, value in fields.items()
            if name in self.updatable_fields and value is not None
        }

    async def update(
        self, caller: CurrentUser, row_id: int, fields: dict[str, Any]
    ) -> ModelT:
        """Apply whitelisted fields; others are silently ignored."""
        row = await self.get(caller, row_id)

        changes = self.pick_updates(fields)
        if not changes:
            raise ValidationError("No fields to update")
        await self.check_references(changes, row)

        for name, value in changes.items():
            setattr(row, name, value)

        await self.db.commit()
        logger.info(
            f"{self.label.lower()}.updated",
            id=row_id,
            fields=sorted(changes),
            by=caller.id,
        )
        return row

    async def update_status(
        self, caller: CurrentUser, row_id: int, new_status: Any
    ) -> ModelT:
        """Status patch — staff only, value validated before anything is loaded."""
        if self.workflow is None:
            raise ValidationError(f"{self.label} has no status")
        ensure_role(caller, self.status_roles)
        if not self.workflow.is_valid(new_status):
            raise ValidationError("Invalid status")

        row = await self.get(caller, row_id)
        old_status = row.status
        self.workflow.check(new_status, old=old_status)
        row.status = new_status

        await self.db.commit()
        logger.info(
            f"{self.label.lower()}.status_changed",
            id=row_id,
            old=old_status,
            new=new_status,
            by=caller.id,
        )
        return row

    # ─── Delete ─────────────────────────────────────────

    async def delete(self, caller: CurrentUser, row_id: int) -> dict[str, Any]:
        self.check_roles(caller, self.delete_roles)
        row = await self.get(caller, row_id)

        await self.db.delete(row)
        await self.db.commit()
        logger.info(f"{self.label.lower()}.deleted", id=row_id, by=caller.id)
        return {"success": True, "message": f"{self.label} deleted"}
