"""
shop_orders.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) passed to the order facade.
"""

from __future__ import annotations

from dataclasses import dataclass

SERVICE_ROLE = "service_role"


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity.

    `subject` is the user id orders are owned by; service principals act on any row.
    """

    subject: str
    roles: frozenset[str]

    @property
    def is_service(self) -> bool:
        return SERVICE_ROLE in self.roles

    @classmethod
    def service(cls, subject: str = SERVICE_ROLE) -> Principal:
        return cls(subject=subject, roles=frozenset({SERVICE_ROLE}))
