"""Application tests for racing writers against the same product.

Each thread opens its own domain context and waits on a barrier, so all of
them start at the same moment.
"""

import threading

from ordering.cart.items import AddToCart
from ordering.inventory import ledger
from ordering.inventory.product import Product
from ordering.order.order import Order
from ordering.order.placement import PlaceOrder
from ordering.shared.errors import InsufficientStock
from protean import current_domain
from protean.exceptions import ExpectedVersionError

BUYERS = 8


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _stock_of(product_id):
    product = current_domain.repository_for(Product).get(product_id)
    return product.stock, product.sale_count


def _race(ordering_bed, action, arguments):
    """Run ``action(argument)`` for every argument at once; return (results, refusals, errors)."""
    barrier = threading.Barrier(len(arguments))
    results, refusals, errors = [], [], []
    lock = threading.Lock()

    def _run(argument):
        with ordering_bed.domain.domain_context():
            barrier.wait()
            try:
                outcome = action(argument)
            except (InsufficientStock, ExpectedVersionError) as exc:
                with lock:
                    refusals.append(exc)
            except Exception as exc:
                with lock:
                    errors.append(exc)
            else:
                with lock:
                    results.append(outcome)

    threads = [threading.Thread(target=_run, args=(argument,)) for argument in arguments]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    return results, refusals, errors


class TestSimultaneousCheckout:
    def test_last_unit_goes_to_exactly_one_buyer(self, ordering_bed, make_customer, make_product):
        product_id = make_product(stock=1)
        buyers = [make_customer(email=f"buyer{i}@example.com", name=f"Buyer {i}") for i in range(BUYERS)]
        for customer_id in buyers:
            _process(AddToCart(customer_id=customer_id, product_id=product_id, quantity=1))

        results, refusals, errors = _race(
            ordering_bed, lambda customer_id: _process(PlaceOrder(customer_id=customer_id)), buyers
        )

        assert errors == []
        assert len(results) == 1
        assert len(refusals) == BUYERS - 1
        assert _stock_of(product_id) == (0, 1)
        orders = current_domain.repository_for(Order)._dao.query.all().items
        assert [str(order.id) for order in orders] == results


class TestConcurrentReserve:
    def test_racing_reservations_never_oversell(self, ordering_bed, make_product):
        product_id = make_product(stock=3)

        results, refusals, errors = _race(ordering_bed, lambda _: ledger.reserve(product_id, 1), list(range(BUYERS)))

        assert errors == []
        assert refusals == []
        granted = results.count(True)
        assert 1 <= granted <= 3
        assert _stock_of(product_id) == (3 - granted, granted)

    def test_lost_race_is_retried_on_a_fresh_read(self, make_product, monkeypatch):
        product_id = make_product(stock=5)
        original_reserve = Product.reserve
        competing_writes = []

        def reserve_after_a_competing_write(self, quantity):
            if not competing_writes:
                competing_writes.append(quantity)
                repo = current_domain.repository_for(Product)
                competitor = repo.get(product_id)
                competitor.restock(1)
                repo.add(competitor)
            return original_reserve(self, quantity)

        monkeypatch.setattr(Product, "reserve", reserve_after_a_competing_write)

        assert ledger.reserve(product_id, 2) is True
        assert competing_writes == [2]
        assert _stock_of(product_id) == (4, 1)

    def test_gives_up_when_every_attempt_loses(self, make_product, monkeypatch):
        product_id = make_product(stock=5)
        original_reserve = Product.reserve

        def reserve_after_a_competing_write(self, quantity):
            repo = current_domain.repository_for(Product)
            competitor = repo.get(product_id)
            competitor.restock(1)
            repo.add(competitor)
            return original_reserve(self, quantity)

        monkeypatch.setattr(Product, "reserve", reserve_after_a_competing_write)

        assert ledger.reserve(product_id, 2, attempts=2) is False
        assert _stock_of(product_id) == (7, 0)
