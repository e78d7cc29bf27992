"""
Backoffice API: Client Model
=============================

What:  ORM model for the `clients` table.
Who:   Referenced by the clients ResourceDescriptor.

The key column keeps its legacy name `id_cliente`; it is also the key name
clients see in JSON bodies.
"""

from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Client(Base):
    """A customer record. `email` is the only optional field."""

    __tablename__ = "clients"

    id_cliente: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    identification_number: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    # Absent or empty email is stored as NULL
    email: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    def __repr__(self) -> str:
        return f"<Client(id_cliente={self.id_cliente}, name='{self.name}')>"
