"""
Test helpers: canned model output and HTTP response doubles.
"""
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from contract_scanner.models import QARecord


SAMPLE_ANALYSIS = {
    "summary": "A 12-month residential lease.",
    "contractType": "Lease",
    "parties": ["Landlord Co.", "Tenant Zhang"],
    "effectiveDate": "2024-01-01",
    "expirationDate": "2024-12-31",
    "keyTerms": [
        {
            "category": "payment",
            "title": "Monthly rent",
            "originalText": "Rent is 5000 per month.",
            "explanation": "You pay 5000 every month.",
            "importance": "high"
        },
        {
            "category": "duration",
            "title": "Lease term",
            "originalText": "Lease term: 12 months.",
            "explanation": "The lease lasts one year.",
            "importance": "medium"
        }
    ],
    "riskItems": [
        {
            "level": "high",
            "title": "Heavy early-termination penalty",
            "description": "Ending early costs three months of rent.",
            "suggestion": "Negotiate the penalty down to one month.",
            "relatedClause": "penalty 3 months rent for early termination"
        }
    ],
    "simplifiedExplanation": "You rent the flat for a year and pay monthly."
}


def make_http_response(status_code=200, json_body=None, text=None):
    """Build a MagicMock that looks like a requests.Response."""
    response = MagicMock()
    response.status_code = status_code

    if json_body is not None:
        response.json.return_value = json_body
        response.text = json.dumps(json_body)
    else:
        response.json.side_effect = ValueError("No JSON object could be decoded")
        response.text = text or ""

    return response


def chat_completion(content):
    """Wrap model text in a chat-completion envelope."""
    return {
        "id": "chatcmpl-test",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]
    }


def make_history(count, contract_id="c-1"):
    """Q&A records with strictly increasing timestamps, oldest first."""
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        QARecord(
            contract_id=contract_id,
            question=f"question {i}",
            answer=f"answer {i}",
            timestamp=start + timedelta(minutes=i)
        )
        for i in range(1, count + 1)
    ]


