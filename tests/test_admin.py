from sqlalchemy import select

from auditionapi.models import DiamondTransactionLog, PaymentTransaction

from conftest import API, auth_headers, get_user


def add_order(db_session, user_id, status="awaiting_approval", order_code=1700000000000):
    order = PaymentTransaction(
        order_code=order_code,
        user_id=user_id,
        package_id=None,
        amount_vnd=50000,
        diamonds_received=120,
        status=status,
    )
    db_session.add(order)
    db_session.commit()
    return order.id


class TestAdminAccess:
    def test_non_admin_forbidden(self, client, make_user):
        user_id = make_user()
        response = client.get(f"{API}/admin-users", headers=auth_headers(user_id))
        assert response.status_code == 403
        assert response.json()["code"] == "AUTH_002"

    def test_list_users(self, client, make_user):
        admin_id = make_user(is_admin=True)
        make_user()

        response = client.get(f"{API}/admin-users", headers=auth_headers(admin_id))
        assert response.status_code == 200
        assert response.json()["total_count"] == 2


class TestAdminUserUpdate:
    def test_diamond_change_writes_adjustment(self, client, db_session, make_user):
        admin_id = make_user(is_admin=True)
        user_id = make_user(diamonds=5)

        response = client.put(
            f"{API}/admin-users",
            json={"userId": user_id, "updates": {"diamonds": 12, "xp": 40}},
            headers=auth_headers(admin_id),
        )

        assert response.status_code == 200
        user = get_user(db_session, user_id)
        assert (user.diamonds, user.xp) == (12, 40)

        entries = list(
            db_session.execute(
                select(DiamondTransactionLog).where(DiamondTransactionLog.user_id == user_id)
            ).scalars()
        )
        assert [(e.amount, e.transaction_type) for e in entries] == [(7, "ADMIN_ADJUSTMENT")]

    def test_negative_diamonds_rejected(self, client, make_user):
        admin_id = make_user(is_admin=True)
        user_id = make_user(diamonds=5)

        response = client.put(
            f"{API}/admin-users",
            json={"userId": user_id, "updates": {"diamonds": -1}},
            headers=auth_headers(admin_id),
        )
        assert response.status_code == 400

    def test_password_goes_to_identity_provider(self, client, make_user, fake_identity_admin):
        admin_id = make_user(is_admin=True)
        user_id = make_user()

        response = client.put(
            f"{API}/admin-users",
            json={"userId": user_id, "updates": {"password": "hunter22"}},
            headers=auth_headers(admin_id),
        )

        assert response.status_code == 200
        assert response.json()["password_updated"] is True
        fake_identity_admin.update_password.assert_awaited_once_with(user_id, "hunter22")

    def test_missing_updates(self, client, make_user):
        admin_id = make_user(is_admin=True)
        response = client.put(
            f"{API}/admin-users", json={"userId": "x"}, headers=auth_headers(admin_id)
        )
        assert response.status_code == 400


class TestAdminTransactions:
    def test_approve_credits_once(self, client, db_session, make_user):
        admin_id = make_user(is_admin=True)
        user_id = make_user(diamonds=0)
        order_id = add_order(db_session, user_id)

        listed = client.get(f"{API}/admin-transactions", headers=auth_headers(admin_id))
        assert [t["id"] for t in listed.json()["transactions"]] == [order_id]

        body = {"transactionId": order_id, "action": "approve"}
        response = client.put(f"{API}/admin-transactions", json=body, headers=auth_headers(admin_id))
        assert response.status_code == 200
        assert response.json()["transaction"]["status"] == "completed"

        user = get_user(db_session, user_id)
        assert (user.diamonds, user.xp) == (120, 50)

        again = client.put(f"{API}/admin-transactions", json=body, headers=auth_headers(admin_id))
        assert again.status_code == 409
        assert get_user(db_session, user_id).diamonds == 120

    def test_reject(self, client, db_session, make_user):
        admin_id = make_user(is_admin=True)
        user_id = make_user(diamonds=0)
        order_id = add_order(db_session, user_id)

        response = client.put(
            f"{API}/admin-transactions",
            json={"transactionId": order_id, "action": "reject"},
            headers=auth_headers(admin_id),
        )
        assert response.status_code == 200
        assert response.json()["transaction"]["status"] == "rejected"
        assert get_user(db_session, user_id).diamonds == 0

    def test_bad_action(self, client, db_session, make_user):
        admin_id = make_user(is_admin=True)
        order_id = add_order(db_session, make_user())

        response = client.put(
            f"{API}/admin-transactions",
            json={"transactionId": order_id, "action": "refund"},
            headers=auth_headers(admin_id),
        )
        assert response.status_code == 400


class TestLedgerIntegrity:
    def test_report(self, client, make_user):
        admin_id = make_user(is_admin=True)
        user_id = make_user(diamonds=0)
        client.post(f"{API}/daily-check-in", headers=auth_headers(user_id))

        response = client.get(
            f"{API}/admin-ledger-integrity/{user_id}", headers=auth_headers(admin_id)
        )
        assert response.status_code == 200
        assert response.json()["status"] == "OK"
        assert response.json()["ledger_sum"] == 5
