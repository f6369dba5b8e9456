from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_employees(
        self,
        *,
        employee_ids: Optional[Sequence[int]] = None,
        department_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[Employee]:
        raise NotImplementedError
