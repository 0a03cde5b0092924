"""
Plain-text export of a contract's analysis.
"""
from contract_scanner.models import AnalysisResult, Contract, Importance, RiskLevel, TermCategory

HEAVY_RULE = "=" * 39
LIGHT_RULE = "-" * 39

EXPORT_SCOPES = ('full', 'key_terms', 'risks', 'summary')

CATEGORY_LABELS = {
    TermCategory.PAYMENT: "Payment",
    TermCategory.LIABILITY: "Liability for Breach",
    TermCategory.TERMINATION: "Termination",
    TermCategory.DURATION: "Duration",
    TermCategory.CONFIDENTIALITY: "Confidentiality",
    TermCategory.DISPUTE: "Dispute Resolution",
    TermCategory.OTHER: "Other",
}

IMPORTANCE_LABELS = {
    Importance.HIGH: "High",
    Importance.MEDIUM: "Medium",
    Importance.LOW: "Low",
}

RISK_LABELS = {
    RiskLevel.HIGH: "High Risk",
    RiskLevel.MEDIUM: "Medium Risk",
    RiskLevel.LOW: "Low Risk",
}


def _section(title: str) -> str:
    return f"{LIGHT_RULE}\n{title}\n{LIGHT_RULE}\n"


def _summary_text(analysis: AnalysisResult) -> str:
    return _section("Summary") + f"{analysis.summary}\n\n\n"


def _key_terms_text(analysis: AnalysisResult) -> str:
    text = _section("Key Terms") + "\n"
    for index, term in enumerate(analysis.key_terms, 1):
        text += (
            f"{index}. [{CATEGORY_LABELS[term.category]}] {term.title}\n"
            f"   Importance: {IMPORTANCE_LABELS[term.importance]}\n"
            f"   Original: {term.original_text}\n"
            f"   Explanation: {term.explanation}\n\n"
        )
    return text + "\n"


def _risks_text(analysis: AnalysisResult) -> str:
    text = _section("Risk Warnings") + "\n"
    for index, risk in enumerate(analysis.risk_items, 1):
        text += (
            f"{index}. [{RISK_LABELS[risk.level]}] {risk.title}\n"
            f"   Description: {risk.description}\n"
            f"   Suggestion: {risk.suggestion}\n"
            f"   Related clause: {risk.related_clause}\n\n"
        )
    return text + "\n"


def _simplified_text(analysis: AnalysisResult) -> str:
    return _section("Plain-Language Reading") + f"{analysis.simplified_explanation}\n"


def generate_text(contract: Contract, scope: str = 'full') -> str:
    """
    Render a contract's analysis as plain text.

    Args:
        contract: Contract to export.
        scope: One of EXPORT_SCOPES.

    Returns:
        The export text. Contracts without an analysis get a short notice.

    Raises:
        ValueError: If scope is unknown.
    """
    if scope not in EXPORT_SCOPES:
        raise ValueError(f"Unknown export scope: {scope!r}")

    text = f"{HEAVY_RULE}\n{contract.title}\n{HEAVY_RULE}\n\n"

    analysis = contract.analysis_result
    if analysis is None:
        return text + "No analysis result available"

    text += f"Analyzed: {contract.updated_at.strftime('%Y-%m-%d %H:%M')}\n"
    text += f"Contract type: {analysis.contract_type}\n\n"

    if scope == 'full':
        text += _summary_text(analysis)
        text += _key_terms_text(analysis)
        text += _risks_text(analysis)
        text += _simplified_text(analysis)
    elif scope == 'key_terms':
        text += _key_terms_text(analysis)
    elif scope == 'risks':
        text += _risks_text(analysis)
    else:
        text += _summary_text(analysis)

    return text
