from conftest import CLINIC_A, CLINIC_B, auth_headers

PRODUCT = {"name": "Surgical Mask", "category": "PPE", "sku": "PPE-010", "price": 0.4, "unit": "each", "quantity": 500}


# -------------------- Clinics --------------------

def test_clinic_crud_by_admin(client, admin):
    headers = auth_headers(admin)
    r = client.post("/api/clinics", json={"name": "East Clinic", "address": "3 East St", "phone": "555-0300"}, headers=headers)
    assert r.status_code == 201
    clinic = r.json()
    assert clinic["isActive"] is True

    r = client.put(f"/api/clinics/{clinic['id']}", json={"phone": "555-0301"}, headers=headers)
    assert r.json()["phone"] == "555-0301"
    assert r.json()["name"] == "East Clinic"

    r = client.patch(f"/api/clinics/{clinic['id']}/status", json={"isActive": False}, headers=headers)
    assert r.json()["isActive"] is False

    assert client.delete(f"/api/clinics/{clinic['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/clinics/{clinic['id']}", headers=headers).status_code == 404


def test_clinic_requires_address_and_phone(client, admin):
    r = client.post("/api/clinics", json={"name": "Nameless"}, headers=auth_headers(admin))
    assert r.status_code == 400
    assert "address" in r.json()["error"]["message"]


def test_staff_sees_only_own_clinic(client, clinics, staff):
    r = client.get("/api/clinics", headers=auth_headers(staff))
    assert [c["id"] for c in r.json()] == [CLINIC_A]
    assert client.get(f"/api/clinics/{CLINIC_B}", headers=auth_headers(staff)).status_code == 403
    r = client.post("/api/clinics", json={"name": "Mine", "address": "x", "phone": "y"}, headers=auth_headers(staff))
    assert r.status_code == 403


def test_clinic_users(client, clinics, manager, staff, outsider):
    r = client.get(f"/api/clinics/{CLINIC_A}/users", headers=auth_headers(manager))
    assert r.status_code == 200
    assert {u["email"] for u in r.json()} == {manager.email, staff.email}


# -------------------- Products --------------------

def test_product_crud(client, admin):
    headers = auth_headers(admin)
    r = client.post("/api/products", json=PRODUCT, headers=headers)
    assert r.status_code == 201
    product = r.json()
    assert product["minStock"] == 0

    r = client.put(f"/api/products/{product['id']}", json={"price": 0.45}, headers=headers)
    assert r.json()["price"] == 0.45
    assert r.json()["sku"] == "PPE-010"

    r = client.put(f"/api/products/{product['id']}", json={"price": -1}, headers=headers)
    assert r.status_code == 400

    assert client.delete(f"/api/products/{product['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/products/{product['id']}", headers=headers).status_code == 404


def test_product_listing_filters(client, staff, gloves, syringes):
    headers = auth_headers(staff)
    r = client.get("/api/products", headers=headers)
    assert [p["name"] for p in r.json()] == ["Syringe 5ml", "Nitrile Gloves"]

    r = client.get("/api/products", params={"category": "PPE"}, headers=headers)
    assert [p["id"] for p in r.json()] == [gloves.id]

    r = client.get("/api/products", params={"q": "<b>sterile</b>"}, headers=headers)
    assert [p["id"] for p in r.json()] == [syringes.id]


def test_search_injection_matches_nothing(client, staff, gloves, syringes):
    r = client.get("/api/products", params={"q": "' OR '1'='1"}, headers=auth_headers(staff))
    assert r.status_code == 200
    assert r.json() == []


def test_inactive_products_hidden_from_non_admins(client, api_repos, admin, staff, gloves):
    api_repos.products.update(gloves.id, {"isActive": False})
    assert client.get("/api/products", headers=auth_headers(staff)).json() == []
    assert len(client.get("/api/products", headers=auth_headers(admin)).json()) == 1


# -------------------- Inventory --------------------

def test_inventory_views(client, admin, clinics, staff, gloves, syringes):
    r = client.get("/api/inventory", headers=auth_headers(admin))
    assert r.status_code == 200
    status = {i["sku"]: (i["status"], i["reorderPoint"]) for i in r.json()}
    assert status == {"PPE-001": ("In Stock", 20), "INJ-005": ("Low Stock", 100)}

    r = client.get("/api/inventory", params={"lowStock": "true"}, headers=auth_headers(admin))
    assert [i["id"] for i in r.json()] == [syringes.id]

    r = client.get(f"/api/inventory/clinics/{CLINIC_A}", headers=auth_headers(staff))
    assert r.status_code == 200
    assert len(r.json()) == 2
    assert client.get(f"/api/inventory/clinics/{CLINIC_B}", headers=auth_headers(staff)).status_code == 403
    assert client.get("/api/inventory", headers=auth_headers(staff)).status_code == 403


def test_stock_update_reclassifies(client, admin, syringes):
    r = client.patch(f"/api/inventory/{syringes.id}", json={"quantity": 400}, headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.json()["status"] == "In Stock"
    assert client.patch("/api/inventory/missing", json={"quantity": 1}, headers=auth_headers(admin)).status_code == 404


def test_inventory_stats(client, admin, clinics, staff, gloves, syringes):
    client.post(
        "/api/orders",
        json={"clinicId": CLINIC_A, "items": [{"productId": gloves.id, "name": gloves.name, "quantity": 6, "price": 12.5}]},
        headers=auth_headers(staff),
    )
    r = client.get("/api/inventory/stats", headers=auth_headers(admin))
    assert r.status_code == 200
    north, south = r.json()
    assert north["clinicName"] == "North Clinic"
    assert north["totalItems"] == 2
    assert north["lowStockItems"] == 1
    # 150 x 12.50 + 50 x 0.35
    assert north["totalOrderValue"] == 1892.5
    assert north["mostOrderedItems"] == [{"itemId": gloves.id, "itemName": gloves.name, "quantity": 6}]
    assert south["mostOrderedItems"] == []


# -------------------- Templates --------------------

def template_payload(gloves, syringes, clinic_id=CLINIC_A):
    return {
        "clinicId": clinic_id,
        "name": "Weekly restock",
        "items": [
            {"productId": gloves.id, "name": gloves.name, "defaultQuantity": 2, "price": 12.5},
            {"productId": syringes.id, "name": syringes.name, "defaultQuantity": 40, "price": 0.35},
        ],
    }


def test_template_lifecycle(client, manager, staff, gloves, syringes):
    r = client.post("/api/templates", json=template_payload(gloves, syringes), headers=auth_headers(manager))
    assert r.status_code == 201
    template = r.json()
    assert template["createdBy"] == manager.id

    r = client.post("/api/templates", json=template_payload(gloves, syringes), headers=auth_headers(staff))
    assert r.status_code == 403

    r = client.get("/api/templates", headers=auth_headers(staff))
    assert [t["id"] for t in r.json()] == [template["id"]]

    r = client.put(f"/api/templates/{template['id']}", json={"name": "Monthly"}, headers=auth_headers(manager))
    assert r.json()["name"] == "Monthly"
    assert len(r.json()["items"]) == 2

    assert client.delete(f"/api/templates/{template['id']}", headers=auth_headers(manager)).status_code == 204
    assert client.get(f"/api/templates/{template['id']}", headers=auth_headers(manager)).status_code == 404


def test_template_for_other_clinic_is_forbidden(client, manager, gloves, syringes):
    r = client.post("/api/templates", json=template_payload(gloves, syringes, CLINIC_B), headers=auth_headers(manager))
    assert r.status_code == 403


def test_apply_template_merges_into_cart(client, manager, staff, gloves, syringes):
    template = client.post("/api/templates", json=template_payload(gloves, syringes), headers=auth_headers(manager)).json()
    cart = [{"id": gloves.id, "name": gloves.name, "quantity": 1, "price": 12.5}]

    r = client.post(
        f"/api/templates/{template['id']}/apply",
        json={"quantities": {syringes.id: 0}, "cart": cart},
        headers=auth_headers(staff),
    )
    assert r.status_code == 200
    assert [(i["id"], i["quantity"]) for i in r.json()] == [(gloves.id, 3)]

    stored = client.get(f"/api/templates/{template['id']}", headers=auth_headers(staff)).json()
    assert stored["frequency"] == 1
    assert stored["lastUsed"] is not None


# -------------------- Settings --------------------

def test_global_settings_admin_only(client, admin, manager):
    payload = {"type": "global", "config": {"currency": "USD"}}
    assert client.post("/api/settings", json=payload, headers=auth_headers(manager)).status_code == 403

    r = client.post("/api/settings", json=payload, headers=auth_headers(admin))
    assert r.status_code == 201
    settings_id = r.json()["id"]

    r = client.get(f"/api/settings/{settings_id}", headers=auth_headers(manager))
    assert r.json()["config"] == {"currency": "USD"}
    r = client.put(f"/api/settings/{settings_id}", json={"config": {"currency": "EUR"}}, headers=auth_headers(manager))
    assert r.status_code == 403


def test_clinic_settings_scoped_to_owner(client, manager, outsider):
    payload = {"type": "clinic", "ownerId": CLINIC_A, "config": {"approvalLimit": 500}}
    r = client.post("/api/settings", json=payload, headers=auth_headers(manager))
    assert r.status_code == 201
    settings_id = r.json()["id"]

    r = client.get("/api/settings", params={"ownerId": CLINIC_A}, headers=auth_headers(manager))
    assert [s["id"] for s in r.json()] == [settings_id]
    assert client.get(f"/api/settings/{settings_id}", headers=auth_headers(outsider)).status_code == 403
    assert client.get("/api/settings", params={"type": "clinic"}, headers=auth_headers(outsider)).json() == []

    r = client.put(f"/api/settings/{settings_id}", json={"config": {"approvalLimit": 750}}, headers=auth_headers(manager))
    assert r.json()["config"] == {"approvalLimit": 750}

    assert client.delete(f"/api/settings/{settings_id}", headers=auth_headers(manager)).status_code == 204


def test_product_update_rejects_nulls(client, admin, gloves):
    headers = auth_headers(admin)
    r = client.put(f"/api/products/{gloves.id}", json={"category": None, "price": None}, headers=headers)
    assert r.status_code == 400
    message = r.json()["error"]["message"]
    assert "category" in message and "price" in message

    stored = client.get(f"/api/products/{gloves.id}", headers=headers).json()
    assert (stored["category"], stored["price"]) == ("PPE", 12.5)
    assert client.get("/api/products", headers=headers).status_code == 200

    r = client.put(f"/api/products/{gloves.id}", json={"manufacturer": None}, headers=headers)
    assert r.status_code == 200


def test_settings_update_rejects_null_config(client, admin):
    headers = auth_headers(admin)
    settings_id = client.post("/api/settings", json={"type": "global", "config": {"currency": "USD"}}, headers=headers).json()["id"]
    r = client.put(f"/api/settings/{settings_id}", json={"config": None}, headers=headers)
    assert r.status_code == 400
    assert client.get("/api/settings", headers=headers).json()[0]["config"] == {"currency": "USD"}
