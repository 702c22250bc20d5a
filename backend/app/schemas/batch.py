from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator, model_validator
from typing import Any, Optional

from app.core.config import settings
from app.schemas.order import OrderFilters, clean_value


class BatchCreate(BaseModel):
    """
    Body of POST /orders/batch.

    Filter fields are kept as received; OrderFilters owns their normalization
    and is built once the body validates.
    """

    model_config = ConfigDict(populate_by_name=True)

    batch_size: int = Field(
        settings.BATCH_DEFAULT_SIZE, alias="batchSize", ge=1, le=settings.MAX_PAGE_SIZE
    )
    max_batches: int = Field(settings.BATCH_DEFAULT_MAX_BATCHES, alias="maxBatches", ge=1)
    created_at_min: Optional[str] = Field(None, alias="createdAtMin")
    created_at_max: Optional[str] = Field(None, alias="createdAtMax")
    financial_status: Optional[str] = Field(None, alias="financialStatus")
    fulfillment_status: Optional[str] = Field(None, alias="fulfillmentStatus")
    sort_key: Optional[str] = Field(None, alias="sortKey")
    reverse: Optional[bool] = None
    callback_url: Optional[str] = None

    _filters: Optional[OrderFilters] = PrivateAttr(None)

    @field_validator("callback_url", mode="before")
    @classmethod
    def drop_blank(cls, v: Any) -> Any:
        return clean_value(v)

    @model_validator(mode="after")
    def build_filters(self) -> "BatchCreate":
        values = {
            "created_at_min": self.created_at_min,
            "created_at_max": self.created_at_max,
            "financial_status": self.financial_status,
            "fulfillment_status": self.fulfillment_status,
            "sort_key": self.sort_key,
        }
        if self.reverse is not None:
            values["reverse"] = self.reverse
        try:
            self._filters = OrderFilters(**values)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ValueError(f"Invalid filters: {problems}") from e
        return self

    def to_filters(self) -> OrderFilters:
        return self._filters


class BatchStartResponse(BaseModel):
    success: bool = True
    batchId: str
    message: str
    estimatedTime: str
    status_endpoint: str
