# app/schemas/knowledge_point.py
from datetime import datetime
from typing import List, Optional

from app.schemas.base import CamelModel


class KnowledgePointAwardCreate(CamelModel):
    post_id: Optional[int] = None
    awarder_id: Optional[int] = None
    points: Optional[int] = None


class KnowledgePointAwardResponse(CamelModel):
    id: int
    post_id: int
    awarder_id: int
    points: int
    created_at: datetime


class AwardResult(CamelModel):
    success: bool = True
    award: KnowledgePointAwardResponse
    total_points_awarded: int
    remaining_points: int
    post_total_points: int


class AwarderAwardItem(CamelModel):
    id: int
    points: int
    created_at: datetime


class AwarderPointsSummary(CamelModel):
    post_id: int
    awarder_id: int
    total_points_awarded: int
    remaining_points: int
    awards: List[AwarderAwardItem]


class PostAwardItem(AwarderAwardItem):
    awarder_id: int


class PostPointsSummary(CamelModel):
    post_id: int
    post_total_points: int
    total_awards: int
    awards: List[PostAwardItem]
