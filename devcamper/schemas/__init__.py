"""
Pydantic request/response models: the API contract, validated at the boundary.
Kept separate from the ORM models so the wire format can change independently
of the table layout.
"""
