"""
Map the generic JSON tree returned by the model into a typed AnalysisResult.

Every field is defaulted independently: a missing or malformed field never
fails the whole analysis. The only failure mode is upstream, when no JSON
object could be extracted at all.
"""
import logging
from typing import Any, List, Optional

from contract_scanner.models import (
    AnalysisResult,
    Importance,
    KeyTerm,
    RiskItem,
    RiskLevel,
    TermCategory,
)

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "no summary available"
DEFAULT_CONTRACT_TYPE = "unknown"
DEFAULT_EXPLANATION = "no explanation available"

DEFAULT_CATEGORY = TermCategory.OTHER
DEFAULT_IMPORTANCE = Importance.MEDIUM
DEFAULT_RISK_LEVEL = RiskLevel.LOW

_CATEGORIES = {category.value: category for category in TermCategory}
_IMPORTANCES = {importance.value: importance for importance in Importance}


def _normalize(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip().lower()


def _string(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _optional_string(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def coerce_category(value: Any) -> TermCategory:
    """Recognized category name, or OTHER."""
    return _CATEGORIES.get(_normalize(value), DEFAULT_CATEGORY)


def coerce_importance(value: Any) -> Importance:
    """Recognized importance name, or MEDIUM."""
    return _IMPORTANCES.get(_normalize(value), DEFAULT_IMPORTANCE)


def coerce_risk_level(value: Any) -> RiskLevel:
    """
    Positive match for the two non-default levels; everything else is LOW.

    Unlike category/importance there is no recognized-set lookup here, so the
    default arm also absorbs "low" itself. Any value that isn't exactly one
    of the two names fails open to LOW, so a misspelled "hihg" is reported
    as low risk.

    Matching folds case and surrounding whitespace (" HIGH " is HIGH), unlike an
    exact raw-value comparison. Inner variations ("very high", "hi gh") are not folded.
    """
    level = _normalize(value)
    if level == "high":
        return RiskLevel.HIGH
    if level == "medium":
        return RiskLevel.MEDIUM
    return DEFAULT_RISK_LEVEL


def _objects(value: Any, field: str) -> List[dict]:
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"'{field}' is {type(value).__name__}, expected a list; using empty list")
        return []

    items = [item for item in value if isinstance(item, dict)]
    if len(items) != len(value):
        logger.warning(f"Skipped {len(value) - len(items)} non-object entries in '{field}'")
    return items


def map_key_term(data: dict) -> KeyTerm:
    return KeyTerm(
        category=coerce_category(data.get('category')),
        title=_string(data.get('title')),
        original_text=_string(data.get('originalText')),
        explanation=_string(data.get('explanation')),
        importance=coerce_importance(data.get('importance'))
    )


def map_risk_item(data: dict) -> RiskItem:
    return RiskItem(
        level=coerce_risk_level(data.get('level')),
        title=_string(data.get('title')),
        description=_string(data.get('description')),
        suggestion=_string(data.get('suggestion')),
        related_clause=_string(data.get('relatedClause'))
    )


def _parties(value: Any) -> tuple:
    if isinstance(value, list) and all(isinstance(party, str) for party in value):
        return tuple(value)
    if value is not None:
        logger.warning("'parties' is not a list of strings; using empty list")
    return ()


def map_analysis(data: dict) -> AnalysisResult:
    """
    Convert an extracted JSON object into an AnalysisResult.

    Args:
        data: Object produced by a response extractor.

    Returns:
        A complete AnalysisResult with defaults filled in for anything missing.
        Key terms and risk items keep the order the model returned them in.
    """
    key_terms = tuple(map_key_term(term) for term in _objects(data.get('keyTerms'), 'keyTerms'))
    risk_items = tuple(map_risk_item(risk) for risk in _objects(data.get('riskItems'), 'riskItems'))

    return AnalysisResult(
        summary=_string(data.get('summary'), DEFAULT_SUMMARY),
        contract_type=_string(data.get('contractType'), DEFAULT_CONTRACT_TYPE),
        parties=_parties(data.get('parties')),
        effective_date=_optional_string(data.get('effectiveDate')),
        expiration_date=_optional_string(data.get('expirationDate')),
        key_terms=key_terms,
        risk_items=risk_items,
        simplified_explanation=_string(data.get('simplifiedExplanation'), DEFAULT_EXPLANATION)
    )
