"""FastAPI routes for the Ordering domain — accounts, products, carts, orders and agents.

Endpoints are plain functions: command processing and the mail it triggers are
blocking, so FastAPI runs them in its threadpool instead of on the event loop.
"""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from ordering.account.codes import ConfirmAccountCode, request_account_code
from ordering.account.management import RegisterAccount, RemoveAccount, SaveShippingAddress
from ordering.api.schemas import (
    AccountIdResponse,
    AddToCartRequest,
    AdminCancelOrderRequest,
    AgentRequest,
    CancelOrderRequest,
    CartItemResponse,
    CartResponse,
    ConfirmAccountCodeRequest,
    ConfirmVerificationRequest,
    IssueAccountCodeRequest,
    OrderIdResponse,
    OrderResponse,
    PlaceOrderRequest,
    ProductIdResponse,
    ProductResponse,
    RegisterAccountRequest,
    RegisterProductRequest,
    ReleasedOrdersResponse,
    RepriceProductRequest,
    RestockProductRequest,
    SaveShippingAddressRequest,
    SetStockRequest,
    StatusResponse,
    UpdateCartQuantityRequest,
)
from ordering.cart.cart import cart_for
from ordering.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from ordering.inventory.management import RegisterProduct, RepriceProduct, RestockProduct, SetStock
from ordering.inventory.product import Product
from ordering.order.assignment import AssignOrder, UnassignAgentOrders, UnassignOrder
from ordering.order.cancellation import AdminCancelOrder, CancelOrder
from ordering.order.delivery import MarkDelivered
from ordering.order.order import Order
from ordering.order.placement import PlaceOrder
from ordering.order.queries import active_orders_for_agent, order_view, orders_for_customer
from ordering.order.verification import ConfirmVerification, request_verification_code


def _order_response(order_id: str) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    return OrderResponse(**order_view(order))


# ---------------------------------------------------------------------------
# Account Router
# ---------------------------------------------------------------------------
account_router = APIRouter(prefix="/accounts", tags=["accounts"])


@account_router.post("", status_code=201, response_model=AccountIdResponse)
def register_account(body: RegisterAccountRequest) -> AccountIdResponse:
    command = RegisterAccount(email=body.email, name=body.name, role=body.role)
    result = current_domain.process(command, asynchronous=False)
    return AccountIdResponse(account_id=result)


@account_router.put("/{account_id}/shipping-address", response_model=StatusResponse)
def save_shipping_address(account_id: str, body: SaveShippingAddressRequest) -> StatusResponse:
    command = SaveShippingAddress(account_id=account_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@account_router.delete("/{account_id}", response_model=ReleasedOrdersResponse)
def remove_account(account_id: str) -> ReleasedOrdersResponse:
    released = current_domain.process(RemoveAccount(account_id=account_id), asynchronous=False)
    return ReleasedOrdersResponse(released=released or 0)


@account_router.post("/{account_id}/codes", status_code=202, response_model=StatusResponse)
def issue_account_code(account_id: str, body: IssueAccountCodeRequest) -> StatusResponse:
    request_account_code(account_id, body.purpose)
    return StatusResponse(status="sent")


@account_router.put("/{account_id}/codes/confirm", response_model=StatusResponse)
def confirm_account_code(account_id: str, body: ConfirmAccountCodeRequest) -> StatusResponse:
    command = ConfirmAccountCode(account_id=account_id, purpose=body.purpose, code=body.code)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductIdResponse)
def register_product(body: RegisterProductRequest) -> ProductIdResponse:
    command = RegisterProduct(**body.model_dump())
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str) -> ProductResponse:
    product = current_domain.repository_for(Product).get(product_id)
    return ProductResponse(
        product_id=str(product.id),
        name=product.name,
        price=product.price,
        image_url=product.image_url,
        stock=product.stock,
        sale_count=product.sale_count,
    )


@product_router.put("/{product_id}/restock", response_model=StatusResponse)
def restock_product(product_id: str, body: RestockProductRequest) -> StatusResponse:
    current_domain.process(RestockProduct(product_id=product_id, quantity=body.quantity), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/stock", response_model=StatusResponse)
def set_stock(product_id: str, body: SetStockRequest) -> StatusResponse:
    current_domain.process(SetStock(product_id=product_id, stock=body.stock), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/price", response_model=StatusResponse)
def reprice_product(product_id: str, body: RepriceProductRequest) -> StatusResponse:
    current_domain.process(RepriceProduct(product_id=product_id, price=body.price), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/{customer_id}", response_model=CartResponse)
def get_cart(customer_id: str) -> CartResponse:
    cart = cart_for(customer_id)
    return CartResponse(
        customer_id=customer_id,
        items=[CartItemResponse(product_id=pid, quantity=qty) for pid, qty in cart.lines()],
    )


@cart_router.post("/{customer_id}/items", response_model=StatusResponse)
def add_cart_item(customer_id: str, body: AddToCartRequest) -> StatusResponse:
    command = AddToCart(
        customer_id=customer_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.put("/{customer_id}/items/{product_id}", response_model=StatusResponse)
def update_cart_item_quantity(
    customer_id: str, product_id: str, body: UpdateCartQuantityRequest
) -> StatusResponse:
    command = UpdateCartQuantity(
        customer_id=customer_id,
        product_id=product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{customer_id}/items/{product_id}", response_model=StatusResponse)
def remove_cart_item(customer_id: str, product_id: str) -> StatusResponse:
    command = RemoveFromCart(
        customer_id=customer_id,
        product_id=product_id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
def place_order(body: PlaceOrderRequest) -> OrderIdResponse:
    result = current_domain.process(PlaceOrder(customer_id=body.customer_id), asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.get("", response_model=list[OrderResponse])
def list_customer_orders(customer_id: str) -> list[OrderResponse]:
    return [OrderResponse(**order_view(order)) for order in orders_for_customer(customer_id)]


@order_router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: str) -> OrderResponse:
    return _order_response(order_id)


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(order_id: str, body: CancelOrderRequest) -> OrderResponse:
    command = CancelOrder(order_id=order_id, customer_id=body.customer_id)
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/admin-cancel", response_model=OrderResponse)
def admin_cancel_order(order_id: str, body: AdminCancelOrderRequest) -> OrderResponse:
    current_domain.process(AdminCancelOrder(order_id=order_id, reason=body.reason), asynchronous=False)
    return _order_response(order_id)


@order_router.post("/{order_id}/verification-code", status_code=202, response_model=StatusResponse)
def send_verification_code(order_id: str) -> StatusResponse:
    request_verification_code(order_id)
    return StatusResponse(status="sent")


@order_router.put("/{order_id}/verify", response_model=OrderResponse)
def confirm_verification(order_id: str, body: ConfirmVerificationRequest) -> OrderResponse:
    current_domain.process(ConfirmVerification(order_id=order_id, code=body.code), asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/assign", response_model=OrderResponse)
def assign_order(order_id: str, body: AgentRequest) -> OrderResponse:
    current_domain.process(AssignOrder(order_id=order_id, agent_id=body.agent_id), asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/unassign", response_model=OrderResponse)
def unassign_order(order_id: str, body: AgentRequest) -> OrderResponse:
    current_domain.process(UnassignOrder(order_id=order_id, agent_id=body.agent_id), asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/deliver", response_model=OrderResponse)
def mark_delivered(order_id: str, body: AgentRequest) -> OrderResponse:
    current_domain.process(MarkDelivered(order_id=order_id, agent_id=body.agent_id), asynchronous=False)
    return _order_response(order_id)


# ---------------------------------------------------------------------------
# Agent Router
# ---------------------------------------------------------------------------
agent_router = APIRouter(prefix="/agents", tags=["agents"])


@agent_router.get("/{agent_id}/orders", response_model=list[OrderResponse])
def list_agent_orders(agent_id: str) -> list[OrderResponse]:
    return [OrderResponse(**order_view(order)) for order in active_orders_for_agent(agent_id)]


@agent_router.delete("/{agent_id}/orders", response_model=ReleasedOrdersResponse)
def unassign_agent_orders(agent_id: str) -> ReleasedOrdersResponse:
    released = current_domain.process(UnassignAgentOrders(agent_id=agent_id), asynchronous=False)
    return ReleasedOrdersResponse(released=released or 0)
