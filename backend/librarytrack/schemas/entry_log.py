"""
Schémas Pydantic pour le journal des passages et le tableau de bord.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class EntryLogResponse(BaseModel):
    id: str
    student_id: str
    student_name: str
    branch: str
    timestamp: datetime
    type: str                      # Entry, Exit
    image_match: Optional[bool]    # None = non comparé / non concluant
    source: Optional[str]

    model_config = {"from_attributes": True}


class DashboardStats(BaseModel):
    total_students: int
    entries_today: int
    currently_inside: int
