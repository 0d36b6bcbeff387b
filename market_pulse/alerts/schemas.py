from enum import StrEnum

from pydantic import BaseModel, Field


class AlertCondition(StrEnum):
    ABOVE = "above"
    BELOW = "below"


class AlertCreate(BaseModel):
    ticker: str = Field(min_length=1, max_length=32)
    target_price: float = Field(gt=0)
    condition: AlertCondition


class Alert(BaseModel):
    ticker: str
    target_price: float
    condition: AlertCondition

    @property
    def alert_id(self) -> str:
        return f"{self.ticker}-{self.condition.value}-{self.target_price}"


class AlertTrigger(BaseModel):
    ticker: str
    condition: AlertCondition
    target_price: float
    current_price: float
    message: str
