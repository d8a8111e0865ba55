"""
Order read tests.

Verifies:
- Owners list and read their own orders
- Other users are refused; ADMIN may read any order
"""

from diarybun.services import cart_service, checkout_service


def _place_order(user, make_item, price=500):
    item = make_item(price=price)
    cart_service.add_to_cart(user.id, item.id)
    return checkout_service.checkout(user.id, "tok_visa")


class TestOrderReads:

    def test_list_own_orders_newest_first(self, client, user, other_user, make_item, gateway, headers_for):
        first = _place_order(user, make_item, price=100)
        second = _place_order(user, make_item, price=200)
        _place_order(other_user, make_item)

        resp = client.get('/api/orders', headers=headers_for(user))
        assert resp.status_code == 200
        assert [o['id'] for o in resp.json['orders']] == [second.id, first.id]

    def test_owner_reads_order(self, client, user, make_item, gateway, headers_for):
        order = _place_order(user, make_item)
        resp = client.get(f'/api/orders/{order.id}', headers=headers_for(user))
        assert resp.status_code == 200
        assert resp.json['order']['total'] == 500
        assert resp.json['order']['items'][0]['title'] == 'Dog Diary'

    def test_other_user_forbidden(self, client, user, other_user, make_item, gateway, headers_for):
        order = _place_order(user, make_item)
        resp = client.get(f'/api/orders/{order.id}', headers=headers_for(other_user))
        assert resp.status_code == 403

    def test_admin_reads_any_order(self, client, user, admin, make_item, gateway, headers_for):
        order = _place_order(user, make_item)
        resp = client.get(f'/api/orders/{order.id}', headers=headers_for(admin))
        assert resp.status_code == 200
        assert resp.json['order']['user_id'] == user.id

    def test_missing_order(self, client, user, headers_for):
        resp = client.get('/api/orders/9999', headers=headers_for(user))
        assert resp.status_code == 404
