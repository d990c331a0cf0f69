"""Define las tablas 'games' y 'usuarios' usando SQLAlchemy ORM."""

from sqlalchemy import Boolean, Column, DateTime, Double, Integer, String, Text, func

from sql_service.db import Base


class Game(Base):
    """
    Modelo SQLAlchemy que representa la tabla 'games'.
    platform, requirements y features se guardan como texto JSON.
    """
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    # DOUBLE y no NUMERIC: el precio no se redondea a dos decimales
    price = Column(Double, nullable=False)
    original_price = Column(Double, nullable=False)
    discount = Column(Double, nullable=False, default=0)
    image = Column(String(500), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    platform = Column(Text, nullable=False)
    rating = Column(Double, nullable=False, default=0)
    description = Column(Text, nullable=False)
    requirements = Column(Text, nullable=False)
    features = Column(Text, nullable=False)
    # Texto y no DATE: el formato se valida, la fecha de calendario no
    release_date = Column(String(10), nullable=False)
    publisher = Column(String(255), nullable=False)
    featured = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())


class Usuario(Base):
    """
    Modelo SQLAlchemy que representa la tabla 'usuarios'.
    El email es la clave de login; la contraseña sólo se guarda hasheada (bcrypt).
    """
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
