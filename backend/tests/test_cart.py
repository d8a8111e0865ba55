"""
Cart tests.

Verifies:
- Adding an item creates a row; adding again bumps quantity by exactly 1
- Only the owner may remove a row
- The cart view sums stored prices
"""

import pytest

from diarybun.errors import Forbidden, NotAuthenticated, NotFound, ValidationError
from diarybun.extensions import db
from diarybun.models import CartItem
from diarybun.services import cart_service
from diarybun.validation import MAX_CART_QUANTITY


class TestAddToCart:

    def test_first_add_creates_row(self, app, user, make_item):
        item = make_item()
        cart_item = cart_service.add_to_cart(user.id, item.id)
        assert cart_item.quantity == 1
        assert cart_item.user_id == user.id

    def test_repeat_add_increments(self, app, user, make_item):
        item = make_item()
        cart_service.add_to_cart(user.id, item.id)
        cart_service.add_to_cart(user.id, item.id)
        cart_item = cart_service.add_to_cart(user.id, item.id)

        assert cart_item.quantity == 3
        assert db.session.query(CartItem).filter_by(user_id=user.id).count() == 1

    def test_carts_are_per_user(self, app, user, other_user, make_item):
        item = make_item()
        cart_service.add_to_cart(user.id, item.id)
        cart_service.add_to_cart(other_user.id, item.id)
        assert db.session.query(CartItem).count() == 2

    def test_unknown_item(self, app, user):
        with pytest.raises(NotFound):
            cart_service.add_to_cart(user.id, 9999)

    def test_requires_identity(self, app, make_item):
        item = make_item()
        with pytest.raises(NotAuthenticated, match="You Must Be Signed In!"):
            cart_service.add_to_cart(None, item.id)

    def test_add_via_http(self, client, user, make_item, headers_for):
        item = make_item(price=750)
        resp = client.post('/api/cart', json={'item_id': item.id}, headers=headers_for(user))
        assert resp.status_code == 200
        assert resp.json['cart_item']['quantity'] == 1
        assert resp.json['cart_item']['item']['price'] == 750

    def test_add_requires_item_id(self, client, user, headers_for):
        resp = client.post('/api/cart', json={'item_id': 'abc'}, headers=headers_for(user))
        assert resp.status_code == 400

    def test_list_body_rejected(self, client, user, headers_for):
        resp = client.post('/api/cart', json=[1], headers=headers_for(user))
        assert resp.status_code == 400
        assert resp.json == {'error': 'Invalid JSON payload'}

    def test_quantity_is_capped(self, app, user, make_item):
        item = make_item()
        cart_item = cart_service.add_to_cart(user.id, item.id)
        cart_item.quantity = MAX_CART_QUANTITY
        db.session.commit()

        with pytest.raises(ValidationError, match="more than 99"):
            cart_service.add_to_cart(user.id, item.id)

        db.session.refresh(cart_item)
        assert cart_item.quantity == MAX_CART_QUANTITY


class TestRemoveFromCart:

    def test_owner_removes_row(self, app, user, make_item):
        item = make_item()
        cart_item = cart_service.add_to_cart(user.id, item.id)
        cart_item_id = cart_item.id

        removed = cart_service.remove_from_cart(cart_item_id, user.id)
        assert removed['id'] == cart_item_id
        assert db.session.get(CartItem, cart_item_id) is None

    def test_removal_deletes_whole_row(self, app, user, make_item):
        item = make_item()
        cart_service.add_to_cart(user.id, item.id)
        cart_item = cart_service.add_to_cart(user.id, item.id)

        removed = cart_service.remove_from_cart(cart_item.id, user.id)
        assert removed['quantity'] == 2
        assert cart_service.load_cart(user.id) == []

    def test_non_owner_forbidden(self, app, user, other_user, make_item):
        item = make_item()
        cart_item = cart_service.add_to_cart(user.id, item.id)

        with pytest.raises(Forbidden):
            cart_service.remove_from_cart(cart_item.id, other_user.id)
        assert db.session.get(CartItem, cart_item.id) is not None

    def test_missing_row(self, app, user):
        with pytest.raises(NotFound, match="No Cart Item Found!"):
            cart_service.remove_from_cart(9999, user.id)

    def test_remove_via_http(self, client, user, other_user, make_item, headers_for):
        item = make_item()
        cart_item = cart_service.add_to_cart(user.id, item.id)

        resp = client.delete(f'/api/cart/{cart_item.id}', headers=headers_for(other_user))
        assert resp.status_code == 403

        resp = client.delete(f'/api/cart/{cart_item.id}', headers=headers_for(user))
        assert resp.status_code == 200
        assert resp.json['cart_item']['item_id'] == item.id


class TestGetCart:

    def test_subtotal_and_count(self, client, user, make_item, headers_for):
        diary = make_item(title="Diary", price=1000)
        pen = make_item(title="Pen", price=150)
        cart_service.add_to_cart(user.id, diary.id)
        cart_service.add_to_cart(user.id, pen.id)
        cart_service.add_to_cart(user.id, pen.id)

        resp = client.get('/api/cart', headers=headers_for(user))
        assert resp.status_code == 200
        assert resp.json['count'] == 3
        assert resp.json['subtotal'] == 1300
        assert [row['item']['title'] for row in resp.json['items']] == ['Diary', 'Pen']
