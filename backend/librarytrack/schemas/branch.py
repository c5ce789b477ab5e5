"""
Schémas Pydantic pour les filières.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class BranchCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom de la filière ne peut pas être vide.")
        return v.strip()


class BranchUpdate(BranchCreate):
    pass


class BranchResponse(BaseModel):
    id: int
    name: str
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}
