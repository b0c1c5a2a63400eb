import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from core import dependencies


@pytest.fixture
def dealer(login_as):
    return login_as("dealer", username="dave")


@pytest.fixture
def customer(login_as):
    return login_as("customer", username="carol")


@pytest.fixture
def bat_id(dealer):
    resp = dealer.post(
        "/api/items",
        json={
            "name": "Cricket Bat",
            "category": "Cricket",
            "price": 1500,
            "quantity": 3,
            "image_url": "http://img/bat.png",
        },
    )
    assert resp.status_code == 200
    return resp.json()["item"]["id"]


# --- Accounts ---


def test_signup_and_duplicate(client):
    body = {"username": "alice", "password": "pw", "role": "customer"}

    resp = client.post("/api/signup", json=body)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Signup successful! Please login."}

    resp = client.post("/api/signup", json={**body, "password": "other", "role": "dealer"})
    assert resp.status_code == 409
    assert resp.json() == {"success": False, "message": "Username already exists."}


def test_signup_missing_field(client):
    resp = client.post("/api/signup", json={"username": "alice", "password": "pw"})

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "All fields are required."}


def test_signup_blank_field(client):
    resp = client.post(
        "/api/signup", json={"username": "  ", "password": "pw", "role": "customer"}
    )
    assert resp.status_code == 400


def test_signup_unknown_role(client):
    resp = client.post(
        "/api/signup", json={"username": "alice", "password": "pw", "role": "admin"}
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_login_wrong_password(client):
    client.post("/api/signup", json={"username": "alice", "password": "pw", "role": "customer"})

    resp = client.post("/api/login", json={"username": "alice", "password": "nope"})

    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid username or password"}


def test_login_does_not_trim_username(client):
    client.post("/api/signup", json={"username": "alice", "password": "pw", "role": "customer"})

    resp = client.post("/api/login", json={"username": "  alice  ", "password": "pw"})

    assert resp.status_code == 401


def test_signup_rejects_password_over_bcrypt_limit(client):
    resp = client.post(
        "/api/signup",
        json={"username": "alice", "password": "x" * 73, "role": "customer"},
    )

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Password must be at most 72 bytes."}


def test_login_with_password_sharing_first_72_bytes_fails(client):
    password = "p" * 72
    client.post(
        "/api/signup", json={"username": "alice", "password": password, "role": "customer"}
    )

    resp = client.post(
        "/api/login", json={"username": "alice", "password": password + "-extra"}
    )

    assert resp.status_code == 401
    assert client.post(
        "/api/login", json={"username": "alice", "password": password}
    ).status_code == 200


def test_login_returns_identity_and_cookie(client):
    client.post("/api/signup", json={"username": "alice", "password": "pw", "role": "dealer"})

    resp = client.post("/api/login", json={"username": "alice", "password": "pw"})

    data = resp.json()
    assert resp.status_code == 200
    assert data["success"] is True
    assert data["username"] == "alice"
    assert data["role"] == "dealer"
    assert data["token"]
    assert "session_token" in resp.cookies


def test_current_user_lifecycle(customer):
    assert customer.get("/api/user").json() == {
        "success": True,
        "username": "carol",
        "role": "customer",
    }

    resp = customer.post("/api/logout")
    assert resp.json() == {"success": True, "message": "Logged out successfully."}

    assert customer.get("/api/user").json() == {
        "success": False,
        "message": "No user logged in.",
    }


def test_session_cookie_refreshed_on_each_request(client, customer):
    resp = customer.get("/api/user")

    assert "session_token" in resp.headers.get("set-cookie", "")
    assert "Max-Age=3600" in resp.headers["set-cookie"]
    assert "set-cookie" not in client.get("/api/user").headers


def test_logout_without_session(client):
    assert client.post("/api/logout").status_code == 200
    assert client.get("/api/logout").json()["success"] is True


def test_bearer_token_identifies_caller(api, client):
    client.post("/api/signup", json={"username": "alice", "password": "pw", "role": "customer"})
    token = client.post("/api/login", json={"username": "alice", "password": "pw"}).json()["token"]

    fresh = TestClient(api)
    resp = fresh.get("/api/user", headers={"Authorization": f"Bearer {token}"})

    assert resp.json()["username"] == "alice"


def test_logout_invalidates_token_everywhere(api, customer):
    token = customer.cookies.get("session_token")
    customer.post("/api/logout")

    fresh = TestClient(api)
    resp = fresh.get("/api/user", headers={"Authorization": f"Bearer {token}"})

    assert resp.json()["success"] is False


# --- Catalogue ---


def test_categories_and_search(client, dealer, bat_id):
    dealer.post(
        "/api/items",
        json={"name": "Football", "category": "Football", "price": 800, "quantity": 10},
    )

    assert sorted(client.get("/api/categories").json()) == ["Cricket", "Football"]

    names = [item["name"] for item in client.get("/api/items", params={"search": "bat"}).json()]
    assert names == ["Cricket Bat"]

    assert len(client.get("/api/items").json()) == 2
    assert len(client.get("/api/items", params={"search": ""}).json()) == 2


def test_item_payload_shape(client, bat_id):
    (item,) = client.get("/api/items").json()
    assert item == {
        "id": bat_id,
        "name": "Cricket Bat",
        "category": "Cricket",
        "price": 1500.0,
        "quantity": 3,
        "image_url": "http://img/bat.png",
    }


# --- Dealer operations ---


def test_add_item_rejects_negative_quantity(dealer):
    resp = dealer.post(
        "/api/items",
        json={"name": "Ball", "category": "Cricket", "price": 10, "quantity": -1},
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_add_item_missing_field(dealer):
    resp = dealer.post("/api/items", json={"name": "Ball", "category": "Cricket", "price": 10})
    assert resp.status_code == 400
    assert resp.json()["message"] == "All fields are required."


def test_add_item_accepts_numeric_strings(dealer):
    resp = dealer.post(
        "/api/items",
        json={"name": "Ball", "category": "Cricket", "price": "12.5", "quantity": "4"},
    )
    assert resp.status_code == 200
    assert resp.json()["item"]["quantity"] == 4


def test_update_quantity(client, dealer, bat_id):
    resp = dealer.put(f"/api/update-quantity/{bat_id}", json={"quantity": 9})

    assert resp.json() == {"success": True, "message": "Item quantity updated successfully!"}
    assert client.get("/api/items").json()[0]["quantity"] == 9


def test_update_quantity_negative(dealer, bat_id):
    resp = dealer.put(f"/api/update-quantity/{bat_id}", json={"quantity": -2})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Quantity cannot be negative."}


def test_update_quantity_unknown_item(dealer):
    resp = dealer.put("/api/update-quantity/999", json={"quantity": 2})
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Item not found."}


def test_delete_item(client, dealer, bat_id):
    assert dealer.delete(f"/api/items/{bat_id}").json()["success"] is True
    assert client.get("/api/items").json() == []

    resp = dealer.delete(f"/api/items/{bat_id}")
    assert resp.status_code == 404


def test_dealer_inventory_view(dealer, customer, bat_id):
    assert [i["id"] for i in dealer.get("/api/dealer/items").json()] == [bat_id]
    assert customer.get("/api/dealer/items").status_code == 403


@pytest.mark.parametrize(
    "method, path, body",
    [
        ("post", "/api/items", {"name": "X", "category": "Y", "price": 1, "quantity": 1}),
        ("put", "/api/update-quantity/1", {"quantity": 5}),
        ("delete", "/api/items/1", None),
    ],
)
def test_dealer_operations_forbidden_for_customer(customer, bat_id, method, path, body):
    kwargs = {"json": body} if body is not None else {}
    resp = getattr(customer, method)(path, **kwargs)

    assert resp.status_code == 403
    assert resp.json()["success"] is False


@pytest.mark.parametrize(
    "method, path, body",
    [
        ("post", "/api/items", {"name": "X", "category": "Y", "price": 1, "quantity": 1}),
        ("put", "/api/update-quantity/1", {"quantity": 5}),
        ("delete", "/api/items/1", None),
    ],
)
def test_dealer_operations_rejected_for_anonymous(client, bat_id, method, path, body):
    kwargs = {"json": body} if body is not None else {}
    resp = getattr(client, method)(path, **kwargs)

    assert resp.status_code == 403
    assert resp.json() == {"success": False, "message": "Please login first."}
    assert client.get("/api/items").json()[0]["quantity"] == 3


# --- Purchases ---


def test_purchase_example(client, customer, bat_id):
    resp = customer.post(f"/api/buy/{bat_id}", json={"quantity": 2})
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "message": "Stock updated successfully! Remaining stock: 1",
        "remaining": 1,
    }

    resp = customer.post(f"/api/buy/{bat_id}", json={"quantity": 2})
    assert resp.status_code == 200
    assert resp.json() == {
        "success": False,
        "message": "Not enough stock available! Only 1 left.",
        "remaining": 1,
    }
    assert client.get("/api/items").json()[0]["quantity"] == 1


@pytest.mark.parametrize("quantity", [0, -3])
def test_purchase_invalid_quantity(customer, bat_id, quantity):
    resp = customer.post(f"/api/buy/{bat_id}", json={"quantity": quantity})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Invalid quantity."}


def test_purchase_unknown_item(customer):
    resp = customer.post("/api/buy/999", json={"quantity": 1})
    assert resp.status_code == 404


def test_purchase_amount_beyond_integer_range(client, customer, bat_id):
    resp = customer.post(f"/api/buy/{bat_id}", json={"quantity": 10**30})

    assert resp.status_code == 200
    assert resp.json() == {
        "success": False,
        "message": "Not enough stock available! Only 3 left.",
        "remaining": 3,
    }
    assert client.get("/api/items").json()[0]["quantity"] == 3


def test_item_id_beyond_integer_range(dealer, customer):
    huge = 10**30

    resp = customer.post(f"/api/buy/{huge}", json={"quantity": 1})
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Item not found."}

    assert dealer.put(f"/api/update-quantity/{huge}", json={"quantity": 1}).status_code == 404
    assert dealer.delete(f"/api/items/{huge}").status_code == 404


def test_update_quantity_beyond_integer_range(dealer, bat_id):
    resp = dealer.put(f"/api/update-quantity/{bat_id}", json={"quantity": 10**30})

    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_purchase_requires_login(client, bat_id):
    resp = client.post(f"/api/buy/{bat_id}", json={"quantity": 1})
    assert resp.status_code == 403
    assert resp.json() == {"success": False, "message": "Please login first."}


def test_dealer_cannot_purchase(dealer, bat_id):
    resp = dealer.post(f"/api/buy/{bat_id}", json={"quantity": 1})
    assert resp.status_code == 403


# --- Contact and misc ---


def test_contact_message(client):
    resp = client.post(
        "/api/contact",
        json={"name": "Ann", "email": "ann@example.com", "subject": "Hi", "message": "Hello"},
    )
    assert resp.status_code == 201
    assert resp.json() == {"success": True, "message": "Message sent successfully."}


def test_contact_message_requires_all_fields(client):
    resp = client.post(
        "/api/contact",
        json={"name": "Ann", "email": "ann@example.com", "subject": "", "message": "Hello"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "All fields are required."}


def test_unknown_route(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Route not found."}


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_storage_failure_reported_as_500(api, client):
    class BrokenInventory:
        def list_categories(self):
            raise OperationalError("SELECT DISTINCT category FROM items", {}, Exception("timeout"))

    api.dependency_overrides[dependencies.get_inventory_manager] = lambda: BrokenInventory()

    resp = client.get("/api/categories")

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Database unavailable."}
