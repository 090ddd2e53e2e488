"""Declarative base shared by all record store models."""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
