"""
Shared Pydantic models for all layers.
All records are immutable (frozen) after creation.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ─── Intent Layer ─────────────────────────────────────────────

class Intent(BaseModel):
    """A named rule mapping trigger keywords to an action and a response template."""
    model_config = {"frozen": True}

    id: str
    name: str
    description: str = ""
    keywords: list[str] = Field(default_factory=list, description="Trigger keywords (substring match)")
    action: str = Field(..., description="Action Executor handler name, e.g. 'get_debtors'")
    response_template: str = Field(default="", description="Template with {{placeholders}}")
    enabled: bool = True
    examples: list[str] = Field(default_factory=list)
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)


# ─── Domain Records (read-only) ───────────────────────────────

class _Record(BaseModel):
    """Domain records keep the store's camelCase keys on the wire."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class Client(_Record):
    id: str
    name: str
    phone: str | None = None
    email: str | None = None


class Debtor(_Record):
    client_id: str
    client_name: str
    total_debt: float
    pending_invoices: int


class PendingInvoice(_Record):
    id: str
    correlative: str
    amount: float | None = None
    date: str | None = None


class Sale(_Record):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel, extra="allow")

    id: str
    correlative: str | None = None
    total: float | None = None
    date: str | None = None


class Product(_Record):
    id: str
    name: str
    price: float
    stock: int | float
    category: str


# ─── Query Results (tagged variants) ──────────────────────────

class DebtorsResult(BaseModel):
    model_config = {"frozen": True}
    kind: Literal["debtors"] = "debtors"
    items: list[Debtor] = Field(default_factory=list)


class ProductsResult(BaseModel):
    model_config = {"frozen": True}
    kind: Literal["products"] = "products"
    items: list[Product] = Field(default_factory=list)


class SalesResult(BaseModel):
    model_config = {"frozen": True}
    kind: Literal["sales"] = "sales"
    items: list[Sale] = Field(default_factory=list)


class GenericResult(BaseModel):
    """Rows with no dedicated block format (e.g. client search hits)."""
    model_config = {"frozen": True}
    kind: Literal["generic"] = "generic"
    items: list[dict[str, Any]] = Field(default_factory=list)


class ClientDebtResult(_Record):
    kind: Literal["client_debt"] = "client_debt"
    client_id: str
    client_name: str
    total_debt: float = 0.0
    pending_invoices: list[PendingInvoice] = Field(default_factory=list)


class SalesTodayResult(_Record):
    kind: Literal["sales_today"] = "sales_today"
    count: int = 0
    total: float = 0.0
    sales: list[Sale] = Field(default_factory=list)


ListResult = Union[DebtorsResult, ProductsResult, SalesResult, GenericResult]
RecordResult = Union[ClientDebtResult, SalesTodayResult]
QueryResult = Annotated[
    Union[DebtorsResult, ProductsResult, SalesResult, GenericResult, ClientDebtResult, SalesTodayResult],
    Field(discriminator="kind"),
]


def result_payload(result: QueryResult) -> list[dict[str, Any]] | dict[str, Any]:
    """Plain JSON-friendly payload of a query result, as handed to the UI."""
    if isinstance(result, (DebtorsResult, ProductsResult, SalesResult)):
        return [item.model_dump(by_alias=True, exclude_none=True) for item in result.items]
    if isinstance(result, GenericResult):
        return [dict(item) for item in result.items]
    return result.model_dump(by_alias=True, exclude={"kind"}, exclude_none=True)


class ActionResult(BaseModel):
    """Output of one Action Executor handler: data or an error, never both."""
    model_config = {"frozen": True}

    data: Optional[QueryResult] = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ─── Engine Output ────────────────────────────────────────────

ResponseType = Literal["data", "error", "normal"]


class ChatResponse(BaseModel):
    """The engine's only unit of output."""
    model_config = {"frozen": True}

    message: str
    type: ResponseType
    data: Any | None = None
    intent: str | None = None


class ChatMessage(BaseModel):
    """Transcript entry as shown by the UI."""
    model_config = {"frozen": True}

    id: str
    text: str
    sender: Literal["user", "bot"]
    timestamp: str = Field(default_factory=utc_now_iso)
    type: Literal["welcome", "error", "data", "normal"] | None = None
    data: Any | None = None
    intent: str | None = None
