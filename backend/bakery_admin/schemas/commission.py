from typing import Optional

from pydantic import BaseModel


class CommissionPlanAssign(BaseModel):
    plan_id: str
    effective_date: Optional[str] = None


class CommissionRecordStatusUpdate(BaseModel):
    status: str
    notes: Optional[str] = None
    payment_reference: Optional[str] = None
    payment_method: Optional[str] = None


class CommissionBatchPayRequest(BaseModel):
    record_ids: list[str]
