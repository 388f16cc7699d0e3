from auditionapi.models import GeneratedImage

from conftest import API, auth_headers, get_user


def add_image(db_session, owner_id, image_id="img-1", is_public=False):
    db_session.add(
        GeneratedImage(
            id=image_id,
            user_id=owner_id,
            kind="single",
            prompt="{}",
            status="done",
            image_url="https://cdn.test/img-1.png",
            is_public=is_public,
        )
    )
    db_session.commit()


def share(client, user_id, image_id="img-1"):
    return client.post(
        f"{API}/share-image", json={"imageId": image_id}, headers=auth_headers(user_id)
    )


class TestShareImage:
    def test_share_debits_and_grants_ticket(self, client, db_session, make_user):
        user_id = make_user(diamonds=5)
        add_image(db_session, user_id)

        response = share(client, user_id)

        assert response.status_code == 200
        data = response.json()
        assert data["newDiamondCount"] == 4
        assert data["spinTickets"] == 1

        db_session.expire_all()
        assert db_session.get(GeneratedImage, "img-1").is_public is True

    def test_already_public_is_conflict(self, client, db_session, make_user):
        user_id = make_user(diamonds=5)
        add_image(db_session, user_id, is_public=True)

        response = share(client, user_id)

        assert response.status_code == 409
        assert get_user(db_session, user_id).diamonds == 5

    def test_insufficient_balance(self, client, db_session, make_user):
        user_id = make_user(diamonds=0)
        add_image(db_session, user_id)

        response = share(client, user_id)

        assert response.status_code == 402
        assert response.json()["code"] == "BALANCE_001"

    def test_not_owner(self, client, db_session, make_user):
        owner_id = make_user(diamonds=5)
        other_id = make_user(diamonds=5)
        add_image(db_session, owner_id)

        response = share(client, other_id)

        assert response.status_code == 403
        assert get_user(db_session, other_id).diamonds == 5

    def test_missing_image(self, client, make_user):
        user_id = make_user(diamonds=5)
        assert share(client, user_id, image_id="nope").status_code == 404

    def test_missing_image_id(self, client, make_user):
        user_id = make_user(diamonds=5)
        response = client.post(f"{API}/share-image", json={}, headers=auth_headers(user_id))
        assert response.status_code == 400
