from conftest import API, auth_headers, get_user

REFERRER_ID = "abcdef12-0000-4000-8000-000000000001"


def refer(client, user_id, code):
    return client.post(
        f"{API}/process-referral", json={"referralCode": code}, headers=auth_headers(user_id)
    )


class TestReferral:
    def test_both_parties_credited(self, client, db_session, make_user):
        make_user(user_id=REFERRER_ID, diamonds=1)
        invitee_id = make_user(diamonds=0)

        response = refer(client, invitee_id, "ABCDEF12")

        assert response.status_code == 200
        assert response.json()["newDiamondCount"] == 5
        assert get_user(db_session, REFERRER_ID).diamonds == 6

    def test_only_once(self, client, db_session, make_user):
        make_user(user_id=REFERRER_ID)
        invitee_id = make_user()

        assert refer(client, invitee_id, "abcdef12").status_code == 200
        assert refer(client, invitee_id, "abcdef12").status_code == 409
        assert get_user(db_session, invitee_id).diamonds == 5

    def test_short_code(self, client, make_user):
        assert refer(client, make_user(), "abc").status_code == 400

    def test_unknown_code(self, client, make_user):
        assert refer(client, make_user(), "ffffffff").status_code == 404

    def test_self_referral(self, client, make_user):
        make_user(user_id=REFERRER_ID)
        assert refer(client, REFERRER_ID, "ABCDEF12").status_code == 400

    def test_wildcard_code_matches_nobody(self, client, db_session, make_user):
        make_user(user_id=REFERRER_ID, diamonds=0)
        invitee_id = make_user(diamonds=0)

        assert refer(client, invitee_id, "%%%%%%%%").status_code == 404
        assert refer(client, invitee_id, "abcdef1_").status_code == 404

        assert get_user(db_session, REFERRER_ID).diamonds == 0
        assert get_user(db_session, invitee_id).diamonds == 0
