"""Per-entity repositories: quotes, jobs, properties, customers, employees.

Each class just configures ResourceRepository. The few places where an
entity needs more than configuration (anonymous quotes, property owner
defaulting, customer password changes, quote → job conversion) override
one hook or add one method.
"""

from typing import Any, Optional

import structlog
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from declutter.auth.dependencies import CurrentUser, ensure_role
from declutter.auth.password import hash_password
from declutter.db.models import (
    COOKIE_CONSENT_VALUES,
    ROLE_CUSTOMER,
    ROLE_MANAGER,
    STAFF_ROLES,
    Job,
    Property,
    Quote,
    User,
)
from declutter.errors import AuthorizationError, ValidationError
from declutter.services.auth_service import AuthService, check_password_strength
from declutter.services.repository import ANYONE, ResourceRepository
from declutter.services.workflow import JOB_WORKFLOW, QUOTE_WORKFLOW

logger = structlog.get_logger()

ADDRESS_FIELDS = ("address", "city", "state", "zip_code")


async def check_customer(db: AsyncSession, customer_id: Optional[int]) -> None:
    """ValidationError unless `customer_id` names a user with the customer role."""
    customer = await db.get(User, customer_id) if customer_id else None
    if customer is None or customer.role != ROLE_CUSTOMER:
        raise ValidationError("Customer not found")


# ═══════════════════════════════════════════════════════════
# Quotes
# ═══════════════════════════════════════════════════════════


class QuoteRepository(ResourceRepository[Quote]):
    """Quote requests. Anyone may submit; only staff move them along."""

    model = Quote
    label = "Quote"
    required_fields = ("name", "email", *ADDRESS_FIELDS)
    updatable_fields = (
        "name", "email", "phone", *ADDRESS_FIELDS,
        "service_type", "property_size", "timeline", "budget_range",
        "additional_info",
    )
    create_roles = ANYONE
    delete_roles = STAFF_ROLES
    workflow = QUOTE_WORKFLOW

    def prepare_create(self, caller, fields):
        # Ownership comes from the token, never from the body.
        fields["customer_id"] = caller.id if caller and caller.is_customer else None
        return fields

    async def convert_to_job(
        self, caller: CurrentUser, quote_id: int, overrides: dict[str, Any]
    ) -> Job:
        """Turn a quote into a scheduled job and mark the quote completed.

        Both writes go through one transaction: if creating the job fails,
        the quote keeps its old status.
        """
        ensure_role(caller, STAFF_ROLES)
        quote = await self.load(quote_id)
        if quote.customer_id is None:
            raise ValidationError("Quote has no customer account to attach a job to")
        if quote.status == "completed" or await self._has_job(quote.id):
            raise ValidationError("Quote has already been converted")

        fields = {
            "quote_id": quote.id,
            "customer_id": quote.customer_id,
            "title": quote.service_type or f"Job for {quote.name}",
            "description": quote.additional_info,
            **{name: getattr(quote, name) for name in ADDRESS_FIELDS},
        }
        fields.update({
            name: value
            for name, value in overrides.items()
            if value is not None and name in JobRepository.creatable_fields
        })
        jobs = JobRepository(self.db)
        jobs.check_required(fields)
        await jobs.check_references(fields)

        try:
            job = Job(**fields)
            job.status = JOB_WORKFLOW.initial
            self.db.add(job)
            quote.status = "completed"
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("quote.converted", quote_id=quote_id, job_id=job.id, by=caller.id)
        return job

    async def _has_job(self, quote_id: int) -> bool:
        result = await self.db.execute(select(Job.id).where(Job.quote_id == quote_id))
        return result.first() is not None


# ═══════════════════════════════════════════════════════════
# Jobs
# ═══════════════════════════════════════════════════════════


class JobRepository(ResourceRepository[Job]):
    model = Job
    label = "Job"
    required_fields = ("customer_id", "title", *ADDRESS_FIELDS)
    creatable_fields = (
        "quote_id", "customer_id", "property_id", "assigned_employee_id",
        "title", "description", *ADDRESS_FIELDS, "start_date", "end_date",
        "estimated_cost", "actual_cost", "notes",
    )
    updatable_fields = (
        "title", "description", *ADDRESS_FIELDS, "start_date", "end_date",
        "estimated_cost", "actual_cost", "notes", "assigned_employee_id",
        "property_id",
    )
    create_roles = STAFF_ROLES
    delete_roles = STAFF_ROLES
    workflow = JOB_WORKFLOW

    async def check_references(self, fields, row=None):
        if row is None:
            await check_customer(self.db, fields.get("customer_id"))
        customer_id = row.customer_id if row is not None else fields.get("customer_id")

        property_id = fields.get("property_id")
        if property_id is not None:
            prop = await self.db.get(Property, property_id)
            if prop is None or prop.customer_id != customer_id:
                raise ValidationError("Property not found for this customer")

        employee_id = fields.get("assigned_employee_id")
        if employee_id is not None:
            employee = await self.db.get(User, employee_id)
            if employee is None or employee.role not in STAFF_ROLES:
                raise ValidationError("Assigned employee not found")


# ═══════════════════════════════════════════════════════════
# Properties
# ═══════════════════════════════════════════════════════════


class PropertyRepository(ResourceRepository[Property]):
    """Customer properties. Owners manage their own; staff manage all."""

    model = Property
    label = "Property"
    required_fields = ("customer_id", *ADDRESS_FIELDS)
    updatable_fields = (*ADDRESS_FIELDS, "property_type", "square_feet", "notes")
    create_roles = ANYONE
    delete_roles = ANYONE

    def prepare_create(self, caller, fields):
        if caller.is_customer:
            owner = fields.get("customer_id") or caller.id
            if owner != caller.id:
                raise AuthorizationError("Unauthorized")
            fields["customer_id"] = owner
        return fields

    async def check_references(self, fields, row=None):
        if row is None:
            await check_customer(self.db, fields.get("customer_id"))


# ═══════════════════════════════════════════════════════════
# Users: customers and employees
# ═══════════════════════════════════════════════════════════


class CustomerRepository(ResourceRepository[User]):
    """Customer accounts. A customer owns exactly one row: their own."""

    model = User
    label = "Customer"
    owner_column = "id"
    updatable_fields = ("name", "phone", "profile_picture", "cookie_consent")
    delete_roles = (ROLE_MANAGER,)

    def base_query(self) -> Select:
        return select(User).where(User.role == ROLE_CUSTOMER)

    async def list(self, caller, **filters):
        ensure_role(caller, STAFF_ROLES)
        return await super().list(caller, **filters)

    async def get(self, caller, row_id):
        # Check ownership before existence so customers can't enumerate ids.
        if caller.is_customer and caller.id != row_id:
            raise AuthorizationError("Unauthorized")
        return await super().get(caller, row_id)

    async def create(self, caller, fields):
        raise ValidationError("Customers are created through registration")

    async def delete(self, caller, row_id):
        """Delete the account row only; refused while jobs or properties point at it."""
        self.check_roles(caller, self.delete_roles)
        for model in (Job, Property):
            result = await self.db.execute(
                select(model.id).where(model.customer_id == row_id).limit(1)
            )
            if result.first() is not None:
                raise ValidationError("Customer still has jobs or properties")
        return await super().delete(caller, row_id)

    def pick_updates(self, fields: dict[str, Any]) -> dict[str, Any]:
        changes = super().pick_updates(fields)
        consent = changes.get("cookie_consent")
        if consent is not None and consent not in COOKIE_CONSENT_VALUES:
            raise ValidationError("Invalid cookie consent value")

        password = fields.get("password")
        if password:
            check_password_strength(password)
            changes["password_hash"] = hash_password(password)
        return changes


class EmployeeRepository(ResourceRepository[User]):
    """Staff accounts (employees and managers), visible to managers only."""

    model = User
    label = "Employee"
    owner_column = "id"
    create_roles = (ROLE_MANAGER,)

    def base_query(self) -> Select:
        return select(User).where(User.role.in_(STAFF_ROLES))

    async def list(self, caller, role: Optional[str] = None):
        ensure_role(caller, (ROLE_MANAGER,))
        if role is not None and role not in STAFF_ROLES:
            raise ValidationError("Invalid role")
        return await super().list(caller, role=role)

    async def get(self, caller, row_id):
        ensure_role(caller, (ROLE_MANAGER,))
        return await super().get(caller, row_id)

    async def create(self, caller, fields):
        """New accounts need hashing and the email checks registration uses."""
        self.check_roles(caller, self.create_roles)
        return await AuthService(self.db).create_employee(
            caller,
            email=fields.get("email"),
            password=fields.get("password"),
            name=fields.get("name"),
            phone=fields.get("phone"),
        )

    async def set_role(self, caller, row_id: int, new_role: str) -> User:
        return await AuthService(self.db).set_role(caller, row_id, new_role)
