import importlib

import pytest
from fastapi.testclient import TestClient

import main
from config.settings import Settings
from main import create_app
from models import Expense
from settlement import Transfer
from store import InMemoryStore


@pytest.fixture
def client(store, settings):
    return TestClient(create_app(settings=settings, store=store))


def _post_expense(client, amount=100, paid_by="Alice", shared_by=("Alice", "Bob"), description="Dinner"):
    return client.post("/expenses", json={
        "description": description,
        "amount": amount,
        "paid_by": paid_by,
        "shared_by": list(shared_by)
    })


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_participants_crud(client):
    assert client.post("/participants", json={"name": "Dave"}).status_code == 201
    assert [p["name"] for p in client.get("/participants").json()] == ["Alice", "Bob", "Carol", "Dave"]

    response = client.delete("/participants/Dave")

    assert response.status_code == 200
    assert response.json() == {"name": "Dave", "removed_expenses": []}


def test_duplicate_participant(client):
    response = client.post("/participants", json={"name": "Alice"})

    assert response.status_code == 400
    assert "already exists" in response.json()["detail"]


def test_delete_unknown_participant(client):
    assert client.delete("/participants/Zed").status_code == 404


def test_expense_crud(client):
    created = _post_expense(client)
    assert created.status_code == 201
    expense_id = created.json()["expense_id"]
    assert expense_id == "E001"

    updated = client.put(f"/expenses/{expense_id}", json={
        "description": "Dinner + tip",
        "amount": 120,
        "paid_by": "Bob",
        "shared_by": ["Alice", "Bob", "Carol"]
    })
    assert updated.status_code == 200
    assert updated.json()["amount"] == 120.0

    listed = client.get("/expenses").json()
    assert [e["description"] for e in listed] == ["Dinner + tip"]

    assert client.delete(f"/expenses/{expense_id}").status_code == 204
    assert client.get("/expenses").json() == []
    assert client.delete(f"/expenses/{expense_id}").status_code == 404


def test_expense_validation(client):
    assert _post_expense(client, amount=0).status_code == 422
    assert _post_expense(client, shared_by=()).status_code == 422
    assert _post_expense(client, paid_by="Zed").status_code == 400
    assert _post_expense(client, shared_by=("Alice", "Zed")).status_code == 400


def test_edit_unknown_expense(client):
    response = client.put("/expenses/E404", json={
        "description": "x", "amount": 1, "paid_by": "Alice", "shared_by": ["Alice"]
    })

    assert response.status_code == 404


def test_balances_and_settlements(client):
    _post_expense(client, amount=100, paid_by="Alice", shared_by=("Alice", "Bob"))

    assert client.get("/balances").json() == {"balances": {"Alice": 50.0, "Bob": -50.0, "Carol": 0.0}}

    body = client.get("/settlements").json()
    assert body["settlements"] == [
        {"from": "Bob", "to": "Alice", "amount": 50.0, "description": "Bob owes Alice $50.00"}
    ]


def test_settlement_amounts_are_rounded_for_display(client):
    _post_expense(client, amount=100, paid_by="Alice", shared_by=("Alice", "Bob", "Carol"))

    body = client.get("/settlements").json()

    assert body["balances"] == {"Alice": 66.67, "Bob": -33.33, "Carol": -33.33}
    assert [s["amount"] for s in body["settlements"]] == [33.33, 33.33]


def test_no_settlements_needed(client):
    assert client.get("/settlements").json() == {
        "balances": {"Alice": 0.0, "Bob": 0.0, "Carol": 0.0},
        "settlements": []
    }


def test_removing_participant_updates_settlements(client):
    _post_expense(client, amount=60, paid_by="Carol", shared_by=("Alice", "Carol"))
    _post_expense(client, amount=40, paid_by="Alice", shared_by=("Alice", "Bob"))

    removed = client.delete("/participants/Carol").json()["removed_expenses"]

    assert removed == ["E001"]
    assert client.get("/settlements").json()["settlements"][0]["from"] == "Bob"


def test_stored_expense_with_empty_share_list_is_reported(store, settings):
    store.add_expense(Expense("E001", "broken", 10.0, "Alice", []))
    client = TestClient(create_app(settings=settings, store=store))

    response = client.get("/settlements")

    assert response.status_code == 400
    assert "shared_by" in response.json()["detail"]


def test_strict_mode_rejects_unknown_participants_in_stored_data():
    store = InMemoryStore(participants=["Alice"], expenses=[Expense("E001", "legacy", 10.0, "Alice", ["Ghost"])])
    client = TestClient(create_app(settings=Settings(store_backend="memory", strict=True), store=store))

    assert client.get("/balances").status_code == 400


def test_permissive_mode_keeps_unknown_participants():
    store = InMemoryStore(participants=["Alice"], expenses=[Expense("E001", "legacy", 10.0, "Alice", ["Ghost"])])
    client = TestClient(create_app(settings=Settings(store_backend="memory", strict=False), store=store))

    assert client.get("/balances").json()["balances"] == {"Alice": 10.0, "Ghost": -10.0}


def test_delete_participant_with_padded_name(client):
    response = client.delete("/participants/%20Alice")

    assert response.status_code == 200
    assert response.json()["name"] == "Alice"


def test_settlement_wire_shape_matches_transfer(client):
    _post_expense(client, amount=100, paid_by="Alice", shared_by=("Alice", "Bob"))

    settlement = client.get("/settlements").json()["settlements"][0]

    assert Transfer("Bob", "Alice", 50.0).to_dict().items() <= settlement.items()


def test_strict_mode_reports_missing_amount_as_bad_request():
    store = InMemoryStore(participants=["Alice"], expenses=[Expense("E001", "legacy", None, "Alice", ["Alice"])])
    client = TestClient(create_app(settings=Settings(store_backend="memory", strict=True), store=store))

    response = client.get("/settlements")

    assert response.status_code == 400
    assert "amount" in response.json()["detail"]


def test_importing_main_builds_nothing(monkeypatch):
    monkeypatch.setenv("SPLITIT_STORE", "postgres")

    module = importlib.reload(main)

    assert not hasattr(module, "app")
    with pytest.raises(ValueError):
        module.create_app()
