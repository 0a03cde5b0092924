"""
Prompt templates and builders for the contract analysis requests.
Builders are pure: they format text and never touch the network.
"""
from typing import Iterable, List

from contract_scanner.models import QARecord

# Number of previous Q&A turns included as context for a new question
HISTORY_LIMIT = 5

# Characters of surrounding contract text included when explaining a clause
EXPLAIN_CONTEXT_LIMIT = 2000

ANALYSIS_PROMPT_TEMPLATE = '''You are a professional contract analyst. Analyze the contract below and return the result as JSON.

CONTRACT TEXT:
{contract_text}

Return the analysis in exactly this JSON format (it MUST be valid JSON):
{{
    "summary": "Overall summary of the contract (100-200 words)",
    "contractType": "Type of contract (e.g. lease, employment, sale of goods)",
    "parties": ["Party A name", "Party B name"],
    "effectiveDate": "Effective date, if stated",
    "expirationDate": "Expiration date, if stated",
    "keyTerms": [
        {{
            "category": "payment/liability/termination/duration/confidentiality/dispute/other",
            "title": "Clause title",
            "originalText": "Original clause text",
            "explanation": "Plain-language explanation",
            "importance": "high/medium/low"
        }}
    ],
    "riskItems": [
        {{
            "level": "high/medium/low",
            "title": "Risk title",
            "description": "Description of the risk",
            "suggestion": "How to address it",
            "relatedClause": "Original text of the related clause"
        }}
    ],
    "simplifiedExplanation": "Explain the main content of the whole contract and what to watch out for, in plain language (300-500 words)"
}}

Notes:
1. Focus on payment terms, liability for breach, termination conditions and contract duration.
2. Flag clauses that may be unfavourable to the signing party as risk items.
3. Explanations must be understandable by someone without legal training.
4. Return ONLY the JSON, with no other content.'''

QUESTION_PROMPT_TEMPLATE = '''You are a professional contract legal adviser. The user is reading a contract and has a question.

CONTRACT TEXT:
{contract_text}

{context_block}User question: {question}

Answer in plain language. If the question involves legal risk, give appropriate advice. Keep the answer concise, under 300 words.'''

HISTORY_BLOCK_TEMPLATE = '''Previous questions and answers:
{turns}

'''

COMPARE_PROMPT_TEMPLATE = '''You are a professional contract analyst. Compare the two contracts below.

[Document A]
{text_a}

[Document B]
{text_b}

Compare them on the following points:
1. Contract type and parties
2. Differences in the main clauses
3. Differences in rights and obligations
4. Differences in risk clauses
5. Summary and recommendation

Use a clear structure and plain language.'''

EXPLAIN_PROMPT_TEMPLATE = '''You are a professional contract legal adviser. The user wants to understand the following contract clause in depth.

CONTRACT CONTEXT:
{context_text}

CLAUSE TO EXPLAIN:
{clause}

Please provide:
1. A plain-language explanation of the clause
2. The legal meaning of the clause
3. Its impact on the signing party
4. Risk points to watch out for
5. Recommendations

Answer in plain language suitable for someone without legal training.'''


def build_analysis_prompt(contract_text: str) -> str:
    """Build the full-analysis prompt. The contract text is embedded verbatim."""
    return ANALYSIS_PROMPT_TEMPLATE.format(contract_text=contract_text)


def _recent_history(history: Iterable[QARecord]) -> List[QARecord]:
    # Snapshot first so a caller appending concurrently can't change the prompt
    records = sorted(list(history), key=lambda record: record.timestamp)
    return records[-HISTORY_LIMIT:]


def build_question_prompt(question: str, contract_text: str, history: Iterable[QARecord] = ()) -> str:
    """
    Build a follow-up question prompt.

    Args:
        question: The user's new question.
        contract_text: Full contract text.
        history: Previous Q&A records for this contract, any order.

    Returns:
        Prompt with the most recent HISTORY_LIMIT turns (oldest first). The
        history block is left out entirely when there is no history.
    """
    recent = _recent_history(history)

    context_block = ""
    if recent:
        turns = "\n\n".join(f"Q: {record.question}\nA: {record.answer}" for record in recent)
        context_block = HISTORY_BLOCK_TEMPLATE.format(turns=turns)

    return QUESTION_PROMPT_TEMPLATE.format(
        contract_text=contract_text,
        context_block=context_block,
        question=question
    )


def build_compare_prompt(text_a: str, text_b: str) -> str:
    """Build a prose comparison prompt for two contracts."""
    return COMPARE_PROMPT_TEMPLATE.format(text_a=text_a, text_b=text_b)


def build_explain_prompt(clause: str, context_text: str) -> str:
    """Build a clause explanation prompt using the first 2000 chars of context."""
    return EXPLAIN_PROMPT_TEMPLATE.format(
        context_text=context_text[:EXPLAIN_CONTEXT_LIMIT],
        clause=clause
    )
