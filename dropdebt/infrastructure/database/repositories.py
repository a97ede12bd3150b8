"""Data access layer for persisted bill priorities"""

from dataclasses import asdict
from typing import List, Optional

from sqlalchemy.orm import Session

from dropdebt.domain.exceptions import BillNotFoundError
from dropdebt.domain.models import Bill, PriorityCalculation
from dropdebt.infrastructure.database.models import BillPriorityRecord

CRITICAL_SORT_KEY = "000090"


class PriorityRepository:
    """Repository for bill priority scores"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str, bill_id: str) -> Optional[BillPriorityRecord]:
        return (
            self.db.query(BillPriorityRecord)
            .filter(BillPriorityRecord.user_id == user_id, BillPriorityRecord.bill_id == bill_id)
            .first()
        )

    def upsert(self, bill: Bill, calculation: PriorityCalculation) -> BillPriorityRecord:
        """Store the latest calculation for a bill; a later write replaces an earlier one"""
        record = self.get(bill.user_id, bill.bill_id)
        if record is None:
            record = BillPriorityRecord(user_id=bill.user_id, bill_id=bill.bill_id)
            self.db.add(record)

        record.bill_name = bill.name
        record.current_balance = bill.current_balance
        record.final_score = calculation.final_score
        record.sort_key = calculation.sort_key
        record.tier = calculation.tier.value
        record.scores = asdict(calculation.scores)
        record.reasoning = asdict(calculation.reasoning)
        record.calculated_at = calculation.calculated_at
        record.archived = False

        self.db.flush()
        return record

    def list_by_priority(
        self,
        user_id: str,
        critical_only: bool = False,
        limit: int = 100,
    ) -> List[BillPriorityRecord]:
        """Active bills for a user, highest priority first"""
        query = self.db.query(BillPriorityRecord).filter(
            BillPriorityRecord.user_id == user_id,
            BillPriorityRecord.archived.is_(False),
        )
        if critical_only:
            query = query.filter(BillPriorityRecord.sort_key >= CRITICAL_SORT_KEY)

        # final_score breaks ties between bills sharing a whole-point key
        return (
            query.order_by(BillPriorityRecord.sort_key.desc(), BillPriorityRecord.final_score.desc())
            .limit(limit)
            .all()
        )

    def archive(self, user_id: str, bill_id: str) -> BillPriorityRecord:
        """Soft delete; the row stays for history

        Raises:
            BillNotFoundError: no priority stored for this bill
        """
        record = self.get(user_id, bill_id)
        if record is None:
            raise BillNotFoundError(f"Bill {bill_id} not found for user {user_id}")
        record.archived = True
        self.db.flush()
        return record
