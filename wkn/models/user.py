from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from wkn.models.base import Base

class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)     # bcrypt hash
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
