"""Database layer for rentmate application."""

from rentmate.database.base import Database
from rentmate.database.factories import create_sqlite_database
from rentmate.database.sqlalchemy_db import SQLAlchemyDatabase

__all__ = ["Database", "SQLAlchemyDatabase", "create_sqlite_database"]
