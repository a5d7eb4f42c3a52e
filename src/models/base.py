"""Declarative base shared by all relational models."""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
