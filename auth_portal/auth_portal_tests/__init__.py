"""
auth_service package

This package contains the backend for the authentication service.
It includes:

- FastAPI application factory (`main.py`) and the edge gate (`middleware.py`)
- SQLAlchemy models, database handle and adapter (`models.py`, `db.py`, `adapter.py`)
- Credentials authorizer, orchestrator and form actions
  (`authorizer.py`, `orchestrator.py`, `actions.py`)
- Pydantic schemas and settings (`schemas.py`, `config.py`)
"""
