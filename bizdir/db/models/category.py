from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from bizdir.db.base import Base


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
