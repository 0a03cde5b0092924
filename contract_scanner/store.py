"""
JSON-file backed store for contracts and Q&A records.
"""
import json
import logging
import os
import threading
from typing import Dict, List, Optional

from pydantic import ValidationError

from contract_scanner.models import Contract, ContractStatus, QARecord, RiskLevel

logger = logging.getLogger(__name__)

CONTRACTS_KEY = "saved_contracts"
QA_RECORDS_KEY = "saved_qa_records"


class ContractStore:
    """
    Key-value persistence for the contract list and the Q&A record list.

    Both lists are kept newest-first in memory and written back to a single
    JSON file after each change.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.RLock()
        self.contracts: List[Contract] = []
        self.qa_records: List[QARecord] = []
        self._load()

    # Contracts

    def add_contract(self, contract: Contract) -> Contract:
        with self._lock:
            self.contracts.insert(0, contract)
            self._save()
        logger.info(f"Added contract {contract.id}: {contract.title}")
        return contract

    def update_contract(self, contract: Contract) -> bool:
        """Replace the stored contract with the same id. Returns False if unknown."""
        with self._lock:
            for index, existing in enumerate(self.contracts):
                if existing.id == contract.id:
                    contract.touch()
                    self.contracts[index] = contract
                    self._save()
                    return True
        logger.warning(f"Update skipped, contract not found: {contract.id}")
        return False

    def delete_contract(self, contract_id: str) -> bool:
        """Delete a contract together with its Q&A records."""
        with self._lock:
            before = len(self.contracts)
            self.contracts = [c for c in self.contracts if c.id != contract_id]
            if len(self.contracts) == before:
                return False
            self.qa_records = [r for r in self.qa_records if r.contract_id != contract_id]
            self._save()
        logger.info(f"Deleted contract {contract_id}")
        return True

    def get_contract(self, contract_id: str) -> Optional[Contract]:
        with self._lock:
            return next((c for c in self.contracts if c.id == contract_id), None)

    def list_contracts(self) -> List[Contract]:
        with self._lock:
            return list(self.contracts)

    # Q&A records

    def add_qa_record(self, record: QARecord) -> QARecord:
        with self._lock:
            self.qa_records.insert(0, record)
            self._save()
        return record

    def get_qa_records(self, contract_id: str) -> List[QARecord]:
        """Records for one contract, oldest first."""
        with self._lock:
            records = [r for r in self.qa_records if r.contract_id == contract_id]
        return sorted(records, key=lambda record: record.timestamp)

    # Statistics

    def stats(self) -> Dict[str, int]:
        with self._lock:
            contracts = list(self.contracts)

        high_risk = sum(
            contract.analysis_result.count_risks(RiskLevel.HIGH)
            for contract in contracts
            if contract.analysis_result is not None
        )
        return {
            'total_contracts': len(contracts),
            'analyzed_contracts': sum(1 for c in contracts if c.status == ContractStatus.COMPLETED),
            'high_risk_count': high_risk
        }

    # Persistence

    def _load(self) -> None:
        if not os.path.exists(self.path):
            logger.info(f"No saved data at {self.path}, starting empty")
            return

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            self.contracts = [Contract.model_validate(item) for item in data.get(CONTRACTS_KEY, [])]
            self.qa_records = [QARecord.model_validate(item) for item in data.get(QA_RECORDS_KEY, [])]
        except (OSError, ValueError, ValidationError, AttributeError) as e:
            logger.error(f"Failed to load saved data from {self.path}: {e}")
            self.contracts = []
            self.qa_records = []
            return

        logger.info(f"Loaded {len(self.contracts)} contracts and {len(self.qa_records)} Q&A records")

    def _save(self) -> None:
        data = {
            CONTRACTS_KEY: [c.model_dump(mode='json') for c in self.contracts],
            QA_RECORDS_KEY: [r.model_dump(mode='json') for r in self.qa_records]
        }

        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)
