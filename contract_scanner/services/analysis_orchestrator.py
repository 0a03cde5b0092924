"""
Analysis orchestrator - drives a contract through its analysis status and
persists every transition.
"""
import logging
from typing import Optional

from contract_scanner.models import Contract

logger = logging.getLogger(__name__)


def run_contract_analysis(contract: Contract, analyzer, store=None) -> Contract:
    """
    Analyze a contract and record the outcome on it.

    pending/analyzing/completed/failed -> analyzing -> completed | failed.
    Starting from completed or failed clears the old result first.

    Args:
        contract: Contract to analyze.
        analyzer: ContractAnalyzer (or anything with analyze_contract(text)).
        store: Optional ContractStore; each transition is saved when given.

    Returns:
        The same contract, now COMPLETED with its result attached.

    Raises:
        ValueError: If the contract has no text.
        AIServiceError: Any pipeline failure. The contract is left FAILED
            with no result before the error is re-raised.
    """
    if not contract.original_text or not contract.original_text.strip():
        raise ValueError("Contract text cannot be blank")

    contract.begin_analysis()
    _save(contract, store)

    try:
        result = analyzer.analyze_contract(contract.original_text)
    except Exception as e:
        logger.error(f"Analysis failed for contract {contract.id}: {type(e).__name__} - {e}")
        contract.fail_analysis()
        _save(contract, store)
        raise

    contract.complete_analysis(result)
    _save(contract, store)
    logger.info(f"Contract {contract.id} analyzed: {len(result.risk_items)} risk items")
    return contract


def _save(contract: Contract, store: Optional[object]) -> None:
    if store is not None:
        store.update_contract(contract)
