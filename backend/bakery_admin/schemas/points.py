from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class PointsAdjustRequest(BaseModel):
    line_user_id: Any = Field(alias="lineUserId")
    points: Any
    description: Optional[str] = None
    admin_note: Optional[str] = Field(default=None, alias="adminNote")

    model_config = {"populate_by_name": True}


class VirtualCardStatusUpdate(BaseModel):
    status: str


class PaymentStatusUpdate(BaseModel):
    payment_status: str = Field(alias="paymentStatus")
    transaction_id: Optional[str] = Field(default=None, alias="transactionId")
    payment_details: Any = Field(default=None, alias="paymentDetails")
    admin_note: Optional[str] = Field(default=None, alias="adminNote")

    model_config = {"populate_by_name": True}


class PointSettingValue(BaseModel):
    id: int
    setting_value: Any = Field(alias="settingValue")

    model_config = {"populate_by_name": True}


class PointSettingsUpdate(BaseModel):
    settings: list[PointSettingValue]


class PointsExportRequest(BaseModel):
    type: str
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    format: Literal["json", "csv"] = "json"

    model_config = {"populate_by_name": True}
