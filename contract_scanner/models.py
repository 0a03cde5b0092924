"""Pydantic models for contracts, analysis results and Q&A records."""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class TermCategory(str, Enum):
    """Category of an extracted key term."""
    PAYMENT = "payment"
    LIABILITY = "liability"
    TERMINATION = "termination"
    DURATION = "duration"
    CONFIDENTIALITY = "confidentiality"
    DISPUTE = "dispute"
    OTHER = "other"


class Importance(str, Enum):
    """How much a key term matters to the signing party."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskLevel(str, Enum):
    """Severity of a flagged risk."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ContractStatus(str, Enum):
    """Analysis lifecycle of a contract."""
    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"


class KeyTerm(BaseModel):
    """One extracted clause with a plain-language explanation."""
    model_config = ConfigDict(frozen=True)

    category: TermCategory = TermCategory.OTHER
    title: str = ""
    original_text: str = ""
    explanation: str = ""
    importance: Importance = Importance.MEDIUM


class RiskItem(BaseModel):
    """One flagged concern with a mitigation suggestion."""
    model_config = ConfigDict(frozen=True)

    level: RiskLevel = RiskLevel.LOW
    title: str = ""
    description: str = ""
    suggestion: str = ""
    related_clause: str = ""


class AnalysisResult(BaseModel):
    """Structured output of a full-contract analysis."""
    model_config = ConfigDict(frozen=True)

    summary: str = "no summary available"
    contract_type: str = "unknown"
    parties: Tuple[str, ...] = ()
    effective_date: Optional[str] = None
    expiration_date: Optional[str] = None
    key_terms: Tuple[KeyTerm, ...] = ()
    risk_items: Tuple[RiskItem, ...] = ()
    simplified_explanation: str = "no explanation available"

    def count_risks(self, level: RiskLevel) -> int:
        return sum(1 for item in self.risk_items if item.level == level)


class QARecord(BaseModel):
    """A single question/answer exchange scoped to one contract."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    contract_id: str
    question: str
    answer: str
    timestamp: datetime = Field(default_factory=_now)


class Contract(BaseModel):
    """
    A user-supplied contract and its (optional) analysis.

    The analysis result is a nested value owned by the contract. It is replaced
    wholesale on re-analysis and never edited in place.
    """
    id: str = Field(default_factory=_new_id)
    title: str
    original_text: str = ""
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)
    status: ContractStatus = ContractStatus.PENDING
    analysis_result: Optional[AnalysisResult] = None

    def begin_analysis(self) -> None:
        """
        Move to ANALYZING.

        Starting from COMPLETED or FAILED is a re-analysis, so any previous
        result is dropped before the pipeline runs again.
        """
        if self.status in (ContractStatus.COMPLETED, ContractStatus.FAILED):
            self.analysis_result = None
        self.status = ContractStatus.ANALYZING

    def complete_analysis(self, result: AnalysisResult) -> None:
        self.analysis_result = result
        self.status = ContractStatus.COMPLETED

    def fail_analysis(self) -> None:
        self.analysis_result = None
        self.status = ContractStatus.FAILED

    def touch(self) -> None:
        self.updated_at = _now()
