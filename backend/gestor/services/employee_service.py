# Overview: Employee administration; credentials always pass through CredentialService.

from __future__ import annotations

import logging

from ..models import Employee
from ..permissions import Action, Module, Role
from ..validation import ConflictError, ValidationError, clean_str, require_fields
from .auth_service import CredentialService
from .permission_service import AuthorizationPolicy
from .store_service import Collection, KeyedStore, WorkingSet, find_record, new_id
from .transaction_service import unit_of_work

logger = logging.getLogger(__name__)


class EmployeeService:
    def __init__(self, store: KeyedStore, lock, policy: AuthorizationPolicy, credentials: CredentialService):
        self.store = store
        self.lock = lock
        self.policy = policy
        self.credentials = credentials

    def list_employees(self) -> list[Employee]:
        return WorkingSet(self.store).employees

    def get_employee(self, employee_id: str) -> Employee:
        return find_record(self.list_employees(), employee_id, "Employee")

    def create_employee(self, actor, data: dict) -> Employee:
        self.policy.require(actor, Module.EMPLOYEES, Action.CREATE)
        data = data or {}
        require_fields(data, ("name", "email", "role", "password"))
        role = self._role(data["role"])

        with unit_of_work(self.store, self.lock) as working:
            email = clean_str(data["email"])
            self._check_email(working, email)
            employee = Employee(
                id=new_id(),
                name=clean_str(data["name"]),
                role=role,
                phone=clean_str(data.get("phone")),
                email=email,
            )
            self.credentials.set_password(employee, data["password"])
            working.employees.append(employee)

        logger.info("Employee %s created by %s", employee.id, getattr(actor, "id", None))
        return employee

    def update_employee(self, actor, employee_id: str, data: dict) -> Employee:
        """
        Edit name, role, phone, email. The password is replaced only when a
        non-empty plaintext is supplied; otherwise the stored digest stays.
        """
        self.policy.require(actor, Module.EMPLOYEES, Action.EDIT)
        data = data or {}
        with unit_of_work(self.store, self.lock) as working:
            employee = find_record(working.employees, employee_id, "Employee")
            if "name" in data:
                name = clean_str(data["name"])
                if not name:
                    raise ValidationError("name must not be empty")
                employee.name = name
            if "role" in data:
                employee.role = self._role(data["role"])
            if "phone" in data:
                employee.phone = clean_str(data["phone"])
            if "email" in data:
                email = clean_str(data["email"])
                if not email:
                    raise ValidationError("email must not be empty")
                self._check_email(working, email, exclude=employee)
                employee.email = email
            if data.get("password"):
                self.credentials.set_password(employee, data["password"])
        return employee

    def delete_employee(self, actor, employee_id: str) -> Employee:
        self.policy.require(actor, Module.EMPLOYEES, Action.DELETE)
        if getattr(actor, "id", None) == employee_id:
            raise ValidationError("Employees cannot delete their own account")
        with unit_of_work(self.store, self.lock) as working:
            employee = find_record(working.employees, employee_id, "Employee")
            working.employees[:] = [e for e in working.employees if e is not employee]
        logger.info("Employee %s deleted by %s", employee_id, getattr(actor, "id", None))
        return employee

    @staticmethod
    def _role(value) -> str:
        role = Role.LEGACY_ALIASES.get(value, value) if isinstance(value, str) else None
        if role not in Role.ALL:
            raise ValidationError(f"role must be one of {', '.join(Role.ALL)}")
        return role

    @staticmethod
    def _check_email(working: WorkingSet, email: str, exclude: Employee | None = None) -> None:
        wanted = email.lower()
        for other in working.load(Collection.EMPLOYEES):
            if other is not exclude and (other.email or "").strip().lower() == wanted:
                raise ConflictError(f"An employee with email {email} already exists")
