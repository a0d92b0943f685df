"""Application tests for the assignment router."""

import pytest
from ordering.account.management import RemoveAccount
from ordering.order.assignment import AssignOrder, UnassignAgentOrders, UnassignOrder
from ordering.order.delivery import MarkDelivered
from ordering.order.order import Order, OrderStatus
from ordering.order.queries import active_orders_for_agent
from ordering.shared.errors import AgentNotFound, InvalidState
from protean import current_domain


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


@pytest.fixture()
def customer_id(make_customer):
    return make_customer()


@pytest.fixture()
def product_id(make_product):
    return make_product(stock=20)


@pytest.fixture()
def received_order(customer_id, product_id, place_order, verify_order):
    """A verified order waiting for an agent."""

    def _make(quantity=1):
        order_id = place_order(customer_id, (product_id, quantity))
        verify_order(order_id)
        return order_id

    return _make


class TestAssignOrder:
    def test_assigns_active_agent(self, received_order, make_agent):
        order_id = received_order()
        agent_id = make_agent()

        _process(AssignOrder(order_id=order_id, agent_id=agent_id))

        order = _order(order_id)
        assert order.status == OrderStatus.OUT_FOR_DELIVERY.value
        assert order.assigned_agent_id == agent_id
        assert order.assigned_agent_email == "ravi@example.com"

    def test_agent_and_customer_are_told(self, notifier, received_order, make_agent):
        order_id = received_order()
        agent_id = make_agent()

        _process(AssignOrder(order_id=order_id, agent_id=agent_id))

        agent_mail = notifier.messages_to("ravi@example.com")
        assert agent_mail[-1]["subject"] == f"New delivery assigned: order #{order_id}"
        assert "Bengaluru" in agent_mail[-1]["text"]
        assert notifier.messages_to("asha@example.com")[-1]["subject"] == f"Order #{order_id} is out for delivery"

    def test_pending_order_cannot_be_assigned(self, customer_id, product_id, place_order, make_agent):
        order_id = place_order(customer_id, (product_id, 1))
        agent_id = make_agent()

        with pytest.raises(InvalidState):
            _process(AssignOrder(order_id=order_id, agent_id=agent_id))

        assert _order(order_id).assigned_agent_id is None

    def test_customer_is_not_an_agent(self, received_order, customer_id):
        order_id = received_order()
        with pytest.raises(AgentNotFound):
            _process(AssignOrder(order_id=order_id, agent_id=customer_id))
        assert _order(order_id).status == OrderStatus.ORDER_RECEIVED.value

    def test_unknown_agent(self, received_order):
        order_id = received_order()
        with pytest.raises(AgentNotFound):
            _process(AssignOrder(order_id=order_id, agent_id="agent-404"))

    def test_removed_agent(self, received_order, make_agent):
        order_id = received_order()
        agent_id = make_agent()
        _process(RemoveAccount(account_id=agent_id))

        with pytest.raises(AgentNotFound):
            _process(AssignOrder(order_id=order_id, agent_id=agent_id))

    def test_assigned_order_cannot_be_reassigned(self, received_order, make_agent):
        order_id = received_order()
        ravi = make_agent()
        meena = make_agent(email="meena@example.com", name="Meena")
        _process(AssignOrder(order_id=order_id, agent_id=ravi))

        with pytest.raises(InvalidState):
            _process(AssignOrder(order_id=order_id, agent_id=meena))

        assert _order(order_id).assigned_agent_id == ravi


class TestUnassignAgentOrders:
    def test_returns_active_orders_to_received(self, received_order, make_agent):
        agent_id = make_agent()
        first, second = received_order(), received_order()
        for order_id in (first, second):
            _process(AssignOrder(order_id=order_id, agent_id=agent_id))

        released = _process(UnassignAgentOrders(agent_id=agent_id))

        assert released == 2
        for order_id in (first, second):
            order = _order(order_id)
            assert order.status == OrderStatus.ORDER_RECEIVED.value
            assert order.assigned_agent_id is None
        assert active_orders_for_agent(agent_id) == []

    def test_delivered_orders_stay_delivered(self, received_order, make_agent):
        agent_id = make_agent()
        delivered, active = received_order(), received_order()
        for order_id in (delivered, active):
            _process(AssignOrder(order_id=order_id, agent_id=agent_id))
        _process(MarkDelivered(order_id=delivered, agent_id=agent_id))

        released = _process(UnassignAgentOrders(agent_id=agent_id))

        assert released == 1
        assert _order(delivered).status == OrderStatus.DELIVERED.value
        assert _order(delivered).assigned_agent_id == agent_id
        assert _order(active).status == OrderStatus.ORDER_RECEIVED.value

    def test_agent_with_no_orders(self, make_agent):
        agent_id = make_agent()
        assert _process(UnassignAgentOrders(agent_id=agent_id)) == 0

    def test_removing_agent_account_releases_orders(self, received_order, make_agent):
        agent_id = make_agent()
        order_id = received_order()
        _process(AssignOrder(order_id=order_id, agent_id=agent_id))

        released = _process(RemoveAccount(account_id=agent_id))

        assert released == 1
        order = _order(order_id)
        assert order.status == OrderStatus.ORDER_RECEIVED.value
        assert order.assigned_agent_id is None

    def test_released_order_can_be_reassigned(self, received_order, make_agent):
        ravi = make_agent()
        meena = make_agent(email="meena@example.com", name="Meena")
        order_id = received_order()
        _process(AssignOrder(order_id=order_id, agent_id=ravi))
        _process(RemoveAccount(account_id=ravi))

        _process(AssignOrder(order_id=order_id, agent_id=meena))

        assert _order(order_id).assigned_agent_id == meena

    def test_long_delivery_history_does_not_hide_active_orders(
        self, customer_id, received_order, make_agent, delivered_history
    ):
        agent_id = make_agent()
        delivered_history(customer_id, agent_id, 105)
        active = received_order()
        _process(AssignOrder(order_id=active, agent_id=agent_id))

        released = _process(RemoveAccount(account_id=agent_id))

        assert released == 1
        order = _order(active)
        assert order.status == OrderStatus.ORDER_RECEIVED.value
        assert order.assigned_agent_id is None


class TestUnassignOrder:
    def test_agent_hands_order_back(self, received_order, make_agent):
        agent_id = make_agent()
        order_id = received_order()
        _process(AssignOrder(order_id=order_id, agent_id=agent_id))

        _process(UnassignOrder(order_id=order_id, agent_id=agent_id))

        order = _order(order_id)
        assert order.status == OrderStatus.ORDER_RECEIVED.value
        assert order.assigned_agent_id is None
        assert order.assigned_agent_email is None
        assert active_orders_for_agent(agent_id) == []

    def test_handed_back_order_can_be_reassigned(self, received_order, make_agent):
        ravi = make_agent()
        meena = make_agent(email="meena@example.com", name="Meena")
        order_id = received_order()
        _process(AssignOrder(order_id=order_id, agent_id=ravi))
        _process(UnassignOrder(order_id=order_id, agent_id=ravi))

        _process(AssignOrder(order_id=order_id, agent_id=meena))

        assert _order(order_id).assigned_agent_id == meena

    def test_only_the_assigned_agent(self, received_order, make_agent):
        ravi = make_agent()
        meena = make_agent(email="meena@example.com", name="Meena")
        order_id = received_order()
        _process(AssignOrder(order_id=order_id, agent_id=ravi))

        with pytest.raises(InvalidState):
            _process(UnassignOrder(order_id=order_id, agent_id=meena))

        order = _order(order_id)
        assert order.status == OrderStatus.OUT_FOR_DELIVERY.value
        assert order.assigned_agent_id == ravi

    def test_unassigned_order_is_refused(self, received_order, make_agent):
        agent_id = make_agent()
        order_id = received_order()

        with pytest.raises(InvalidState):
            _process(UnassignOrder(order_id=order_id, agent_id=agent_id))

    def test_delivered_order_is_refused(self, received_order, make_agent):
        agent_id = make_agent()
        order_id = received_order()
        _process(AssignOrder(order_id=order_id, agent_id=agent_id))
        _process(MarkDelivered(order_id=order_id, agent_id=agent_id))

        with pytest.raises(InvalidState):
            _process(UnassignOrder(order_id=order_id, agent_id=agent_id))

        assert _order(order_id).status == OrderStatus.DELIVERED.value
