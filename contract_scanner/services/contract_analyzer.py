"""
Contract analyzer - wires prompt builder, LLM client, extractor and field
mapper into the four request types.
"""
import logging
import time
from typing import Iterable, Optional

from contract_scanner.models import AnalysisResult, QARecord
from contract_scanner.services import prompt_builder
from contract_scanner.services.field_mapper import map_analysis
from contract_scanner.services.response_extractor import BraceJsonExtractor

logger = logging.getLogger(__name__)


class ContractAnalyzer:
    """
    Runs AI requests for contracts.

    Holds no per-call state: the client and extractor are injected once and
    each method is an independent request/response cycle. Errors from any
    stage (see contract_scanner.services.errors) propagate unchanged.
    """

    def __init__(self, client, extractor=None):
        """
        Args:
            client: Object with send_prompt(prompt) -> str (normally LLMClient).
            extractor: Object with extract(raw) -> dict. Defaults to brace matching.
        """
        self.client = client
        self.extractor = extractor if extractor is not None else BraceJsonExtractor()

    def analyze_contract(self, text: str) -> AnalysisResult:
        """
        Run the full structured analysis.

        Raises:
            AIServiceError: Transport, response-shape or parse failure.
        """
        start_time = time.time()
        logger.info(f"Starting contract analysis: {len(text)} chars")

        prompt = prompt_builder.build_analysis_prompt(text)
        raw = self.client.send_prompt(prompt)
        data = self.extractor.extract(raw)
        result = map_analysis(data)

        duration = time.time() - start_time
        logger.info(
            f"Analysis complete: type={result.contract_type}, "
            f"key_terms={len(result.key_terms)}, risks={len(result.risk_items)}, "
            f"duration={duration:.2f}s"
        )
        return result

    def ask_question(self, question: str, contract_text: str,
                     history: Optional[Iterable[QARecord]] = None) -> str:
        """Answer a follow-up question using up to five previous turns as context."""
        logger.info(f"Processing question: {question[:50]}...")
        prompt = prompt_builder.build_question_prompt(question, contract_text, history or ())
        return self.client.send_prompt(prompt)

    def compare_contracts(self, text_a: str, text_b: str) -> str:
        """Compare two contracts; the answer is prose, not JSON."""
        logger.info(f"Comparing contracts: {len(text_a)} vs {len(text_b)} chars")
        return self.client.send_prompt(prompt_builder.build_compare_prompt(text_a, text_b))

    def explain_clause(self, clause: str, context_text: str) -> str:
        """Explain one clause in depth; the answer is prose, not JSON."""
        logger.info(f"Explaining clause: {clause[:50]}...")
        return self.client.send_prompt(prompt_builder.build_explain_prompt(clause, context_text))
