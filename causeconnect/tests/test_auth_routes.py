import pytest
from argon2.exceptions import HashingError
from conftest import TEST_EMAIL, TEST_PASSWORD, flashes

from causeconnect.database.stores import StoreError


def session_token(client):
    with client.session_transaction() as sess:
        return sess.get("_user_id")


def test_signup_then_login(client, user_store):
    response = client.post("/signup", data={"email": "a@b.com", "password": "abcde"})

    assert response.status_code == 302
    assert response.headers["Location"] == "/login"
    assert len(user_store) == 1
    assert ("success", "You are now registered and can log in") in flashes(client)

    response = client.post("/login", data={"email": "a@b.com", "password": "abcde"})

    assert response.status_code == 302
    assert response.headers["Location"] == "/dashboard"
    assert session_token(client)

    response = client.get("/dashboard")
    assert response.status_code == 200
    assert "a@b.com" in response.get_data(as_text=True)


def test_signup_stores_hash_not_plaintext(client, user_store):
    client.post("/signup", data={"email": "a@b.com", "password": "abcde"})

    user = user_store.get_user_by_email("a@b.com")
    assert user.password_hash != "abcde"
    assert user.password_hash.startswith("$argon2")


def test_signup_normalizes_email(client, user_store):
    client.post("/signup", data={"email": "  Mixed@Example.COM ", "password": "abcde"})

    assert user_store.get_user_by_email("mixed@example.com") is not None


def test_signup_duplicate_email(client, user_store, registered_user):
    response = client.post("/signup", data={"email": TEST_EMAIL, "password": "otherpass"})

    assert response.headers["Location"] == "/signup"
    assert ("error", "Email is already registered") in flashes(client)
    assert len(user_store) == 1


def test_signup_validation_messages_are_joined(client, user_store):
    response = client.post("/signup", data={"email": "not-an-email", "password": "abc"})

    assert response.headers["Location"] == "/signup"
    assert flashes(client) == [
        ("error", "Enter a valid email Password must be at least 5 characters long")
    ]
    assert len(user_store) == 0


def test_signup_missing_fields(client, user_store):
    response = client.post("/signup", data={})

    assert response.headers["Location"] == "/signup"
    assert len(user_store) == 0


def test_signup_store_failure_is_not_leaked(client, user_store, mocker):
    mocker.patch.object(user_store, "create_user", side_effect=StoreError("connection refused"))

    response = client.post("/signup", data={"email": "a@b.com", "password": "abcde"})

    assert response.headers["Location"] == "/signup"
    messages = flashes(client)
    assert messages == [("error", "Something went wrong, please try again")]


def test_login_wrong_password(client, registered_user):
    response = client.post("/login", data={"email": TEST_EMAIL, "password": "wrong-password"})

    assert response.headers["Location"] == "/login"
    assert session_token(client) is None
    assert ("error", "Incorrect password.") in flashes(client)


def test_login_unknown_email(client):
    response = client.post("/login", data={"email": "nobody@example.com", "password": "abcde"})

    assert response.headers["Location"] == "/login"
    assert session_token(client) is None
    assert ("error", "Incorrect username.") in flashes(client)


def test_login_validation_failure(client, registered_user):
    response = client.post("/login", data={"email": "", "password": ""})

    assert response.headers["Location"] == "/login"
    assert flashes(client) == [("error", "Enter a valid email Password cannot be empty")]
    assert session_token(client) is None


def test_login_is_case_insensitive_on_email(client, registered_user):
    response = client.post("/login", data={"email": TEST_EMAIL.upper(), "password": TEST_PASSWORD})

    assert response.headers["Location"] == "/dashboard"


def test_logout_clears_session(logged_in_client):
    response = logged_in_client.get("/logout")

    assert response.headers["Location"] == "/login"
    assert session_token(logged_in_client) is None

    response = logged_in_client.get("/dashboard")
    assert response.headers["Location"] == "/login"


def test_login_and_signup_pages_render(client):
    assert client.get("/login").status_code == 200
    assert client.get("/signup").status_code == 200


def test_flash_is_shown_once(client):
    client.post("/login", data={"email": "bad", "password": ""})

    first = client.get("/login").get_data(as_text=True)
    second = client.get("/login").get_data(as_text=True)

    assert "Enter a valid email" in first
    assert "Enter a valid email" not in second


@pytest.mark.parametrize(
    "email",
    ["a@b..com", "a@b.com.", "a,b@c.com", "x" * 400 + "@b.com", "Name <a@b.com>"],
)
def test_signup_rejects_malformed_email(client, user_store, email):
    response = client.post("/signup", data={"email": email, "password": "abcde"})

    assert response.headers["Location"] == "/signup"
    assert flashes(client) == [("error", "Enter a valid email")]
    assert len(user_store) == 0


def test_signup_folds_gmail_aliases(client, user_store):
    client.post("/signup", data={"email": "John.Doe+news@GoogleMail.com", "password": "abcde"})

    assert user_store.get_user_by_email("johndoe@gmail.com") is not None

    response = client.post("/signup", data={"email": "johndoe@gmail.com", "password": "abcde"})
    assert response.headers["Location"] == "/signup"
    assert ("error", "Email is already registered") in flashes(client)

    response = client.post("/login", data={"email": "j.o.h.n.doe@gmail.com", "password": "abcde"})
    assert response.headers["Location"] == "/dashboard"


def test_signup_hashing_failure_is_not_leaked(client, user_store, mocker):
    mocker.patch(
        "causeconnect.auth_service.routes.hash_password",
        side_effect=HashingError("Decoding failed"),
    )

    response = client.post("/signup", data={"email": "a@b.com", "password": "abcde"})

    assert response.headers["Location"] == "/signup"
    assert flashes(client) == [("error", "Something went wrong, please try again")]
    assert len(user_store) == 0


def test_logout_deletes_session_record(logged_in_client, session_store):
    assert len(session_store) == 1

    logged_in_client.get("/logout")

    assert len(session_store) == 0


def test_logged_out_cookie_cannot_be_replayed(logged_in_client, session_store):
    with logged_in_client.session_transaction() as sess:
        saved = dict(sess)

    logged_in_client.get("/logout")

    # Put the pre-logout cookie contents back, as a copied cookie would
    with logged_in_client.session_transaction() as sess:
        sess.clear()
        sess.update(saved)

    response = logged_in_client.get("/dashboard")

    assert response.status_code == 302
    assert response.headers["Location"] == "/login"
    assert len(session_store) == 0


def test_logout_survives_session_store_failure(logged_in_client, session_store, mocker):
    mocker.patch.object(session_store, "delete_session", side_effect=StoreError("connection refused"))

    response = logged_in_client.get("/logout")

    assert response.headers["Location"] == "/login"
    assert session_token(logged_in_client) is None
    assert ("success", "You have been logged out") in flashes(logged_in_client)


def test_login_session_store_failure_is_not_leaked(client, registered_user, session_store, mocker):
    mocker.patch.object(session_store, "create_session", side_effect=StoreError("connection refused"))

    response = client.post("/login", data={"email": TEST_EMAIL, "password": TEST_PASSWORD})

    assert response.headers["Location"] == "/login"
    assert session_token(client) is None
    assert flashes(client) == [("error", "Something went wrong, please try again")]
