from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import EmploymentStatus, Role, ShiftKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, normalize_mysql_date
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, full_name, shift, status, role,
    department_id, designation, start_date, termination_date
"""


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        full_name=r["full_name"],
        shift=ShiftKind(r.get("shift") or ShiftKind.DAY.value),
        status=EmploymentStatus(r["status"]),
        role=Role(r.get("role") or Role.EMPLOYEE.value),
        department_id=int(r["department_id"]) if r.get("department_id") is not None else None,
        designation=r.get("designation"),
        start_date=normalize_mysql_date(r.get("start_date")),
        termination_date=normalize_mysql_date(r.get("termination_date")),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_employees(
        self,
        *,
        employee_ids: Optional[Sequence[int]] = None,
        department_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[Employee]:
        clauses = ["1=1"]
        params: list[object] = []

        if employee_ids:
            clauses.append(f"employee_id IN ({in_clause(employee_ids)})")
            params.extend(int(i) for i in employee_ids)
        if department_ids:
            clauses.append(f"department_id IN ({in_clause(department_ids)})")
            params.extend(int(i) for i in department_ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE {' AND '.join(clauses)} ORDER BY full_name",
                tuple(params),
            )
            return [_to_employee(r) for r in fetchall(cur)]
