"""
DevCamper API
=============

Bootcamp directory backend: bootcamps, their courses and reviews, users,
JWT authentication and an ownership-based access policy.

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Business Logic)         │  ← access policy, geocoding,
    │                                     │    photo storage, mail
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
