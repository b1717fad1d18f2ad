"""Strict shapes for model replies, one per operation.

Field names follow the JSON keys the prompts ask for; snake_case attributes
are exposed through aliases.
"""
from __future__ import annotations
from typing import Any, Dict, List, Type, TypeVar
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from clausescope.utils.exception import InvalidModelResponse
from clausescope.utils.types import ClauseCategory, RiskLevel


class ModelReply(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ClauseClassification(ModelReply):
    category: ClauseCategory
    risk_level: RiskLevel = Field(alias="riskLevel")
    plain_english: str = Field(alias="plainEnglish")
    concerns: List[str] = []


class DetectedRisk(ModelReply):
    type: str
    description: str
    impact: str = ""
    severity: RiskLevel


class RiskDetection(ModelReply):
    detected_risks: List[DetectedRisk] = Field(alias="detectedRisks")
    overall_risk_score: int = Field(alias="overallRiskScore", ge=0, le=100)
    red_flags: List[str] = Field(default_factory=list, alias="redFlags")


class PlainEnglish(ModelReply):
    simple: str
    what_it_means: str = Field(alias="whatItMeans")
    risks: List[str] = []
    summary: str

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ClauseAnswer(ModelReply):
    answer: str
    source_text: str = Field(default="", alias="sourceText")
    conditions: List[str] = []


class RiskySection(ModelReply):
    title: str
    text: str
    risk: str
    severity: RiskLevel


class FairSection(ModelReply):
    title: str
    text: str


class DocumentAnalysis(ModelReply):
    risky_sections: List[RiskySection] = Field(alias="riskySections")
    fair_sections: List[FairSection] = Field(alias="fairSections")
    summary: str


class RoutedCall(ModelReply):
    function: str
    args: Dict[str, Any]


ReplyT = TypeVar("ReplyT", bound=ModelReply)


def parse_reply(model: Type[ReplyT], raw: str, operation: str) -> ReplyT:
    """Validate ``raw`` as JSON of ``model``'s shape, no repair attempted."""
    try:
        return model.model_validate_json(raw)
    except PydanticValidationError as e:
        raise InvalidModelResponse(operation, raw, detail=f"{e.error_count()} validation error(s)") from e
