from __future__ import annotations

from typing import Optional, Protocol

from .model import AdminConfig


class AdminConfigRepository(Protocol):
    def get(self) -> Optional[AdminConfig]:
        raise NotImplementedError
