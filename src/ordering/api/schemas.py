"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    name: str | None = None
    phone: str | None = None
    postal_code: str | None = None
    city: str | None = None
    landmark: str | None = None


class OrderLineSchema(BaseModel):
    product_id: str
    name: str
    price_at_order: float
    quantity: int
    image_url: str | None = None


# ---------------------------------------------------------------------------
# Account Request Schemas
# ---------------------------------------------------------------------------
class RegisterAccountRequest(BaseModel):
    email: str
    name: str | None = None
    role: str = "Customer"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "asha@example.com",
                    "name": "Asha",
                    "role": "Customer",
                }
            ]
        }
    }


class SaveShippingAddressRequest(BaseModel):
    name: str
    phone: str
    postal_code: str
    city: str
    landmark: str | None = None


class IssueAccountCodeRequest(BaseModel):
    purpose: str


class ConfirmAccountCodeRequest(BaseModel):
    purpose: str
    code: str


# ---------------------------------------------------------------------------
# Product Request Schemas
# ---------------------------------------------------------------------------
class RegisterProductRequest(BaseModel):
    name: str
    price: float = Field(ge=0)
    stock: int = Field(ge=0, default=0)
    image_url: str | None = None


class RestockProductRequest(BaseModel):
    quantity: int = Field(ge=1)


class SetStockRequest(BaseModel):
    stock: int = Field(ge=0)


class RepriceProductRequest(BaseModel):
    price: float = Field(ge=0)


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int = Field(ge=0)


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    customer_id: str


class CancelOrderRequest(BaseModel):
    customer_id: str


class AdminCancelOrderRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=200)


class ConfirmVerificationRequest(BaseModel):
    code: str = Field(min_length=1, max_length=10)


class AgentRequest(BaseModel):
    agent_id: str


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class AccountIdResponse(BaseModel):
    account_id: str


class ProductIdResponse(BaseModel):
    product_id: str


class OrderIdResponse(BaseModel):
    order_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class ReleasedOrdersResponse(BaseModel):
    released: int


class ProductResponse(BaseModel):
    product_id: str
    name: str
    price: float
    image_url: str | None = None
    stock: int
    sale_count: int


class CartItemResponse(BaseModel):
    product_id: str
    quantity: int


class CartResponse(BaseModel):
    customer_id: str
    items: list[CartItemResponse]


class OrderResponse(BaseModel):
    order_id: str
    customer_id: str
    customer_email: str
    status: str
    lines: list[OrderLineSchema]
    total_amount: float
    payment_method: str
    shipping_address: ShippingAddressSchema | None = None
    placed_at: str | None = None
    cancellation_deadline: str | None = None
    is_cancellable: bool
    cancellation_reason: str | None = None
    assigned_agent_id: str | None = None
    assigned_agent_email: str | None = None
    delivered_at: str | None = None
