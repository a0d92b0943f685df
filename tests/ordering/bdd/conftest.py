"""Shared BDD fixtures and step definitions for the Ordering domain.

Steps drive the real command handlers against the in-memory providers set up
by the parent conftest. People and products are referred to by name in the
feature files; ``scene`` maps those names to identifiers.
"""

import re
from datetime import datetime

import pytest
from ordering.account.management import RemoveAccount
from ordering.cart.cart import ShoppingCart
from ordering.cart.items import AddToCart
from ordering.inventory.product import Product
from ordering.order.assignment import AssignOrder
from ordering.order.order import Order
from protean import current_domain
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from pytest_bdd import given, parsers, then, when

_CODE = re.compile(r"\b(\d{6})\b")


def email_of(name):
    return f"{name.lower()}@example.com"


@pytest.fixture()
def scene():
    """Identifiers and outcomes shared between the steps of one scenario."""
    return {"products": {}, "accounts": {}, "order_id": None, "customer": None, "placed": [], "error": None}


@pytest.fixture()
def attempt(scene):
    """Process a command, or call a service function, recording a domain failure in ``scene``."""

    def _attempt(action):
        try:
            if callable(action):
                result = action()
            else:
                result = current_domain.process(action, asynchronous=False)
        except (ValidationError, InvalidOperationError, ObjectNotFoundError) as exc:
            scene["error"] = exc
            return None
        scene["error"] = None
        return result

    return _attempt


@pytest.fixture()
def last_code_sent(notifier):
    """The six-digit code in the newest email to the named person."""

    def _code(name):
        message = notifier.messages_to(email_of(name))[-1]
        return _CODE.search(message["text"]).group(1)

    return _code


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the current time is "{moment}"'))
def _(frozen_clock, moment):
    frozen_clock.now = datetime.fromisoformat(moment)


@given(parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'))
def _(scene, make_product, name, price, stock):
    scene["products"][name] = make_product(name=name, price=price, stock=stock)


@given(parsers.cfparse('a customer "{name}" with a shipping address'))
def _(scene, make_customer, name):
    scene["accounts"][name] = make_customer(email=email_of(name), name=name)


@given(parsers.cfparse('a customer "{name}" without a shipping address'))
def _(scene, make_customer, name):
    scene["accounts"][name] = make_customer(email=email_of(name), name=name, with_address=False)


@given(parsers.cfparse('a delivery agent "{name}"'))
def _(scene, make_agent, name):
    scene["accounts"][name] = make_agent(email=email_of(name), name=name)


@given(parsers.cfparse('"{customer}" has {quantity:d} "{product}" in the cart'))
def _(scene, customer, quantity, product):
    current_domain.process(
        AddToCart(
            customer_id=scene["accounts"][customer],
            product_id=scene["products"][product],
            quantity=quantity,
        ),
        asynchronous=False,
    )


@given(parsers.cfparse('"{customer}" has placed an order for {quantity:d} "{product}"'))
def _(scene, place_order, customer, quantity, product):
    scene["order_id"] = place_order(scene["accounts"][customer], (scene["products"][product], quantity))
    scene["customer"] = customer


@given("the order has been verified")
def _(scene, verify_order):
    verify_order(scene["order_id"])


@given(parsers.cfparse('the order is out for delivery with "{agent}"'))
def _(scene, agent):
    current_domain.process(
        AssignOrder(order_id=scene["order_id"], agent_id=scene["accounts"][agent]),
        asynchronous=False,
    )


@given("the mail server is refusing messages")
def _(notifier):
    notifier.configure(should_succeed=False)


# ---------------------------------------------------------------------------
# When steps shared by several features
# ---------------------------------------------------------------------------
@when(parsers.cfparse("{minutes:d} minutes pass"))
def _(frozen_clock, minutes):
    frozen_clock.advance(minutes=minutes)


@when(parsers.cfparse('the order is assigned to "{agent}"'))
def _(scene, attempt, agent):
    attempt(AssignOrder(order_id=scene["order_id"], agent_id=scene["accounts"][agent]))


@when(parsers.cfparse('the account of "{name}" is removed'))
def _(scene, attempt, name):
    attempt(RemoveAccount(account_id=scene["accounts"][name]))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(scene, status):
    assert current_domain.repository_for(Order).get(scene["order_id"]).status == status


@then(parsers.cfparse("the action fails with {error_type}"))
def _(scene, error_type):
    assert scene["error"] is not None, "Expected the action to fail"
    assert error_type in {cls.__name__ for cls in type(scene["error"]).__mro__}


@then(parsers.cfparse('"{product}" has {stock:d} left in stock'))
def _(scene, product, stock):
    assert current_domain.repository_for(Product).get(scene["products"][product]).stock == stock


@then(parsers.cfparse('the cart of "{customer}" is empty'))
def _(scene, customer):
    assert current_domain.repository_for(ShoppingCart).get(scene["accounts"][customer]).is_empty


@then(parsers.cfparse('the cart of "{customer}" still holds {quantity:d} "{product}"'))
def _(scene, customer, quantity, product):
    cart = current_domain.repository_for(ShoppingCart).get(scene["accounts"][customer])
    assert cart.lines() == [(scene["products"][product], quantity)]


@then(parsers.cfparse('"{name}" receives an email "{subject_fragment}"'))
def _(notifier, name, subject_fragment):
    subjects = [message["subject"] for message in notifier.messages_to(email_of(name))]
    assert any(subject_fragment in subject for subject in subjects), subjects
