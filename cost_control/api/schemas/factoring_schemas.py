# This file defines factoring entity request and response models.

from __future__ import annotations

from datetime import datetime

from cost_control.api.schemas.common import CamelModel, EnvelopeFields


class FactoringEntityWrite(CamelModel):
    name: str


class FactoringEntityV1(CamelModel):
    id: int
    name: str
    created_at: datetime | None = None


class FactoringEntityResponseV1(EnvelopeFields):
    data: FactoringEntityV1


class FactoringEntityListResponseV1(EnvelopeFields):
    data: list[FactoringEntityV1]
