from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

from ordering.account.account import Account, AccountRole
from ordering.account.management import RegisterAccount, SaveShippingAddress
from ordering.cart.items import AddToCart
from ordering.inventory.management import RegisterProduct
from ordering.notifier import reset_notifier, set_notifier
from ordering.notifier.fake import FakeNotifier
from ordering.order.order import Order
from ordering.order.placement import PlaceOrder
from ordering.order.verification import ConfirmVerification, request_verification_code
from ordering.utils import clock

T0 = datetime(2026, 3, 2, 10, 0, tzinfo=UTC)


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        # Clear all databases and the event store between tests
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def notifier():
    fake = FakeNotifier()
    set_notifier(fake)
    yield fake
    reset_notifier()


class FrozenClock:
    def __init__(self, now):
        self.now = now

    def advance(self, **delta):
        self.now += timedelta(**delta)
        return self.now


@pytest.fixture()
def frozen_clock(monkeypatch):
    """Pin ``clock.utc_now()`` to T0; move it with ``frozen_clock.advance(minutes=...)``."""
    frozen = FrozenClock(T0)
    monkeypatch.setattr(clock, "utc_now", lambda: frozen.now)
    return frozen


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
def _process(command):
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def make_product():
    def _make(name="Clay Teapot", price=25.0, stock=10, image_url="https://img.example.com/teapot.png"):
        return _process(RegisterProduct(name=name, price=price, stock=stock, image_url=image_url))

    return _make


@pytest.fixture()
def make_customer():
    def _make(email="asha@example.com", name="Asha", with_address=True):
        account_id = _process(RegisterAccount(email=email, name=name))
        if with_address:
            _process(
                SaveShippingAddress(
                    account_id=account_id,
                    name=name,
                    phone="9876543210",
                    postal_code="560001",
                    city="Bengaluru",
                    landmark="Near the old temple",
                )
            )
        return account_id

    return _make


@pytest.fixture()
def make_agent():
    def _make(email="ravi@example.com", name="Ravi"):
        return _process(RegisterAccount(email=email, name=name, role=AccountRole.DELIVERY_AGENT.value))

    return _make


@pytest.fixture()
def place_order():
    """Fill the customer's cart with ``(product_id, quantity)`` lines and check it out."""

    def _place(customer_id, *lines):
        for product_id, quantity in lines:
            _process(AddToCart(customer_id=customer_id, product_id=product_id, quantity=quantity))
        return _process(PlaceOrder(customer_id=customer_id))

    return _place


@pytest.fixture()
def verify_order():
    """Issue a verification code for the order and confirm it."""

    def _verify(order_id):
        request_verification_code(order_id)
        code = current_domain.repository_for(Order).get(order_id).verification_code
        _process(ConfirmVerification(order_id=order_id, code=code))

    return _verify


@pytest.fixture()
def delivered_history():
    """Store ``count`` delivered orders for the customer, all handled by the agent.

    Orders are written straight through the repository, which keeps long
    histories cheap to build.
    """

    def _history(customer_id, agent_id, count):
        accounts = current_domain.repository_for(Account)
        customer, agent = accounts.get(customer_id), accounts.get(agent_id)
        repo = current_domain.repository_for(Order)
        for _ in range(count):
            order = Order.place(
                customer_id=customer_id,
                customer_email=customer.email,
                lines_data=[
                    {"product_id": "retired-teapot", "name": "Clay Teapot", "price_at_order": 25.0, "quantity": 1}
                ],
                shipping_address=customer.shipping_address,
            )
            order.confirm_verification(order.issue_verification_code())
            order.assign(agent_id=agent_id, agent_email=agent.email)
            order.mark_delivered(agent_id=agent_id)
            repo.add(order)

    return _history
