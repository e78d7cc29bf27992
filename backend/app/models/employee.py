"""
Backoffice API: Employee Model
===============================

What:  ORM model for the `employees` table.
Who:   Referenced by the employees ResourceDescriptor; the generic
       ResourceService builds its statements from this table.

Columns:
    id      server-generated key (auto-increment), immutable after create
    name    required
    role    required
    salary  required, fixed-point amount
"""

from decimal import Decimal

from sqlalchemy import Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Employee(Base):
    """A staff member. All fields are required on create and update."""

    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(100), nullable=False)
    salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, name='{self.name}', role='{self.role}')>"
