# hazardscan/schemas/analysis.py
"""Strict shape of the hazard report the vision model must return."""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional

from hazardscan.core.constants import HazardCategory, HazardSeverity, SafetyGrade


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Hazard(CamelModel):
    id: str
    description: str
    location: str
    category: HazardCategory
    severity: HazardSeverity
    immediate_solutions: List[str]
    long_term_solutions: List[str]
    estimated_cost: Optional[str] = None
    time_to_implement: Optional[str] = None
    priority: int = Field(ge=1, le=10)


class OverallAssessment(CamelModel):
    risk_score: int = Field(ge=0, le=100)
    safety_grade: SafetyGrade
    top_priorities: List[str] = Field(max_length=3)
    compliance_standards: List[str] = Field(default_factory=list)


class AnalysisMetadata(CamelModel):
    analysis_time: float
    tokens_used: int
    confidence: float = Field(ge=0, le=100)


class AnalysisResult(CamelModel):
    hazards: List[Hazard]
    overall_assessment: OverallAssessment
    metadata: AnalysisMetadata

    @property
    def hazard_count(self) -> int:
        return len(self.hazards)

    def to_payload(self) -> dict:
        """camelCase JSON-ready dict, the form stored on the inspection row"""
        return self.model_dump(mode="json", by_alias=True)
