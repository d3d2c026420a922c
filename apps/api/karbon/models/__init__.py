"""SQLAlchemy models package; importing it registers every table on Base.metadata."""

from karbon.models.base import BaseModel, ModelMixin
from karbon.models.certificate import Certificate
from karbon.models.company import Company
from karbon.models.emissions import (
    EmissionInput,
    EmissionInputDetail,
    EmissionResult,
    EmissionSource,
)
from karbon.models.enums import BEST_LEVEL, EmissionCategory, EmissionLevel

__all__ = [
    "BEST_LEVEL",
    "BaseModel",
    "Certificate",
    "Company",
    "EmissionCategory",
    "EmissionInput",
    "EmissionInputDetail",
    "EmissionLevel",
    "EmissionResult",
    "EmissionSource",
    "ModelMixin",
]
