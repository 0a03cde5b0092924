"""
Unit tests for plain-text export.
"""
from datetime import datetime, timezone

import pytest

from contract_scanner.models import Contract
from contract_scanner.services.export_service import EXPORT_SCOPES, HEAVY_RULE, generate_text
from contract_scanner.services.field_mapper import map_analysis


@pytest.fixture
def analyzed_contract(sample_analysis):
    contract = Contract(title="Apartment Lease", original_text="...")
    contract.complete_analysis(map_analysis(sample_analysis))
    contract.updated_at = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)
    return contract


class TestGenerateText:

    def test_full_export(self, analyzed_contract):
        text = generate_text(analyzed_contract)

        assert text.startswith(f"{HEAVY_RULE}\nApartment Lease\n{HEAVY_RULE}\n\n")
        assert "Analyzed: 2024-03-15 09:30\n" in text
        assert "Contract type: Lease\n" in text
        for title in ("Summary", "Key Terms", "Risk Warnings", "Plain-Language Reading"):
            assert f"\n{title}\n" in text
        assert "1. [Payment] Monthly rent\n" in text
        assert "   Importance: High\n" in text
        assert "2. [Duration]" in text
        assert "1. [High Risk] Heavy early-termination penalty\n" in text
        assert "   Related clause: penalty 3 months rent for early termination\n" in text
        assert text.endswith("You rent the flat for a year and pay monthly.\n")

    def test_sections_in_order(self, analyzed_contract):
        text = generate_text(analyzed_contract, 'full')

        positions = [text.index(f"\n{title}\n")
                     for title in ("Summary", "Key Terms", "Risk Warnings", "Plain-Language Reading")]
        assert positions == sorted(positions)

    @pytest.mark.parametrize("scope, included, excluded", [
        ('key_terms', "Key Terms", "Risk Warnings"),
        ('risks', "Risk Warnings", "Key Terms"),
        ('summary', "Summary", "Plain-Language Reading"),
    ])
    def test_partial_scopes(self, analyzed_contract, scope, included, excluded):
        text = generate_text(analyzed_contract, scope)

        assert f"\n{included}\n" in text
        assert f"\n{excluded}\n" not in text
        assert "Contract type: Lease" in text

    @pytest.mark.parametrize("scope", EXPORT_SCOPES)
    def test_contract_without_analysis(self, scope):
        text = generate_text(Contract(title="Draft"), scope)

        assert text == f"{HEAVY_RULE}\nDraft\n{HEAVY_RULE}\n\nNo analysis result available"

    def test_unknown_scope(self, analyzed_contract):
        with pytest.raises(ValueError, match="Unknown export scope"):
            generate_text(analyzed_contract, 'pdf')
