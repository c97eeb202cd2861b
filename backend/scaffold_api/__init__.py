"""
Declarative CRUD scaffolding on FastAPI and SQLAlchemy.
"""
