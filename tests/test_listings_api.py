# tests/test_listings_api.py
import uuid

from vahaan import crud, services


def test_create_listing_backfills_and_derives(client, listing_payload):
    resp = client.post("/api/bikes", json=listing_payload())
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Bike listed successfully"
    data = body["data"]
    assert uuid.UUID(data["id"])
    assert data["kind"] == "bike"
    assert data["discount"] == 25
    assert data["priceDifference"] == 50000
    assert data["license"] == "MH12AB1234"
    assert data["seller"] == {"name": "Ravi Kumar", "email": "ravi@example.com", "phone": "9876543210"}
    assert data["contactInfo"]["phone"] == "9876543210"
    assert data["contactInfo"]["email"] == "ravi@example.com"
    assert data["location"]["country"] == "India"
    assert data["availability"] == "available"
    assert data["isActive"] is True
    assert data["viewCount"] == 0
    assert data["createdAt"] and data["updatedAt"]


def test_capacity_rule_on_create(client, listing_payload):
    resp = client.post("/api/bikes", json=listing_payload(engineCapacity=None))
    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation error"
    assert "Engine capacity is required for petrol vehicles" in resp.json()["errors"]

    resp = client.post("/api/scooters", json=listing_payload(type="Electric", engineCapacity=None))
    assert resp.status_code == 400
    assert "Battery capacity is required for electric vehicles" in resp.json()["errors"]

    resp = client.post(
        "/api/scooters", json=listing_payload(type="Electric", engineCapacity=None, batteryCapacity="3kWh")
    )
    assert resp.status_code == 201


def test_missing_required_fields_are_listed(client):
    resp = client.post("/api/bikes", json={"type": "Petrol", "engineCapacity": "150cc"})
    assert resp.status_code == 400
    errors = resp.json()["errors"]
    assert any(e.startswith("name") for e in errors)
    assert any(e.startswith("presentPrice") for e in errors)


def test_non_object_body_is_rejected(client):
    resp = client.post("/api/bikes", json=["not", "an", "object"])
    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation error"


def test_pagination_remainder_and_beyond_last_page(client, create_listing):
    for i in range(7):
        create_listing(name=f"Bike {i}")

    resp = client.get("/api/bikes", params={"limit": 3, "page": 3})
    data = resp.json()["data"]
    assert len(data["bikes"]) == 1
    assert data["pagination"] == {
        "currentPage": 3,
        "totalPages": 3,
        "totalCount": 7,
        "hasNextPage": False,
        "hasPrevPage": True,
    }

    resp = client.get("/api/bikes", params={"limit": 3, "page": 4})
    data = resp.json()["data"]
    assert data["bikes"] == []
    assert data["pagination"]["hasNextPage"] is False


def test_default_sort_is_newest_first(client, create_listing):
    first = create_listing(name="First")
    second = create_listing(name="Second")
    names = [b["name"] for b in client.get("/api/bikes").json()["data"]["bikes"]]
    assert names == [second["name"], first["name"]]

    resp = client.get("/api/bikes", params={"sort": "presentPrice"})
    assert resp.status_code == 200


def test_sort_by_price(client, create_listing):
    create_listing(name="Mid", presentPrice=100000)
    create_listing(name="Low", presentPrice=50000)
    create_listing(name="High", presentPrice=180000)
    names = [b["name"] for b in client.get("/api/bikes?sort=-presentPrice").json()["data"]["bikes"]]
    assert names == ["High", "Mid", "Low"]


def test_filters(client, create_listing):
    create_listing(name="Classic 350", brand="Royal Enfield", presentPrice=180000, description="Cruiser")
    create_listing(name="Duke 200", brand="KTM", presentPrice=140000, condition="Excellent")
    create_listing(
        name="iQube", brand="TVS", presentPrice=110000, type="Electric",
        engineCapacity=None, batteryCapacity="3kWh", description="Quiet city commuter",
    )

    def names(**params):
        resp = client.get("/api/bikes", params=params)
        assert resp.status_code == 200
        return sorted(b["name"] for b in resp.json()["data"]["bikes"])

    assert names(type="Electric") == ["iQube"]
    assert names(type="Diesel") == ["Classic 350", "Duke 200", "iQube"]
    assert names(condition="Excellent") == ["Duke 200"]
    assert names(condition="Mint") == ["Classic 350", "Duke 200", "iQube"]
    assert names(brand="royal") == ["Classic 350"]
    assert names(search="COMMUTER") == ["iQube"]
    assert names(search="duke") == ["Duke 200"]
    assert names(minPrice=140000) == ["Classic 350", "Duke 200"]
    assert names(maxPrice=140000) == ["Duke 200", "iQube"]
    assert names(minPrice=120000, maxPrice=160000) == ["Duke 200"]


def test_kinds_are_isolated(client, create_listing):
    bike = create_listing()
    assert client.get("/api/scooters").json()["data"]["scooters"] == []
    resp = client.get(f"/api/scooters/{bike['id']}")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Scooter not found"


def test_view_count_increments_per_read(client, create_listing):
    bike = create_listing()
    first = client.get(f"/api/bikes/{bike['id']}").json()["data"]
    second = client.get(f"/api/bikes/{bike['id']}").json()["data"]
    assert first["viewCount"] == 1
    assert second["viewCount"] == 2


def test_malformed_id_is_distinct_from_missing(client):
    resp = client.get("/api/bikes/not-an-id")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid bike ID format"

    resp = client.get(f"/api/bikes/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Bike not found"

    for method in ("put", "delete"):
        kwargs = {"json": {}} if method == "put" else {}
        assert getattr(client, method)("/api/bikes/123", **kwargs).status_code == 400
    assert client.patch("/api/bikes/123/sold").status_code == 400
    assert client.patch(f"/api/bikes/{uuid.uuid4()}/sold").status_code == 404


def test_soft_delete(client, create_listing):
    bike = create_listing()
    resp = client.delete(f"/api/bikes/{bike['id']}")
    assert resp.status_code == 200
    assert resp.json()["data"]["isActive"] is False

    listed = client.get("/api/bikes").json()["data"]["bikes"]
    assert bike["id"] not in [b["id"] for b in listed]

    resp = client.get(f"/api/bikes/{bike['id']}")
    assert resp.status_code == 200
    assert resp.json()["data"]["isActive"] is False

    # second delete is a no-op success
    resp = client.delete(f"/api/bikes/{bike['id']}")
    assert resp.status_code == 200
    assert resp.json()["data"]["isActive"] is False


def test_mark_sold_from_any_state(client, create_listing):
    bike = create_listing(availability="reserved")
    resp = client.patch(f"/api/bikes/{bike['id']}/sold")
    assert resp.status_code == 200
    assert resp.json()["data"]["availability"] == "sold"
    assert client.get("/api/bikes").json()["data"]["bikes"] == []
    sold = client.get("/api/bikes", params={"availability": "sold"}).json()["data"]["bikes"]
    assert [b["id"] for b in sold] == [bike["id"]]


def test_update(client, create_listing):
    bike = create_listing()
    resp = client.put(f"/api/bikes/{bike['id']}", json={"presentPrice": 100000, "license": "ka05xy9"})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["discount"] == 50
    assert data["license"] == "KA05XY9"
    assert data["id"] == bike["id"]
    assert data["createdAt"] == bike["createdAt"]

    resp = client.put(f"/api/bikes/{bike['id']}", json={"type": "Electric"})
    assert resp.status_code == 400
    assert "Battery capacity is required for electric vehicles" in resp.json()["errors"]

    resp = client.put(f"/api/bikes/{bike['id']}", json={"year": 1999})
    assert resp.status_code == 400
    assert "Year must be 2000 or later" in resp.json()["errors"]

    resp = client.put(f"/api/bikes/{uuid.uuid4()}", json={"presentPrice": 1})
    assert resp.status_code == 404


def test_listings_by_type(client, create_listing):
    create_listing(name="Petrol one")
    create_listing(name="Electric one", type="Electric", engineCapacity=None, batteryCapacity="3kWh")
    resp = client.get("/api/bikes/type/Electric")
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Electric bikes retrieved successfully"
    assert [b["name"] for b in body["data"]["bikes"]] == ["Electric one"]

    resp = client.get("/api/bikes/type/Diesel")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid bike type. Must be Petrol or Electric"


def test_price_range_endpoint(client, create_listing):
    create_listing(name="Cheap", presentPrice=15000)
    create_listing(name="Mid", presentPrice=30000)
    create_listing(name="Dear", presentPrice=90000)

    resp = client.get("/api/bikes/price-range/20000/50000")
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Bikes in price range ₹20,000 - ₹50,000 retrieved successfully"
    assert [b["name"] for b in body["data"]["bikes"]] == ["Mid"]
    assert body["data"]["pagination"]["totalCount"] == 1

    for path in ("50000/20000", "-1/100", "abc/100"):
        resp = client.get(f"/api/bikes/price-range/{path}")
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid price range"


def test_stats_overview(client, create_listing):
    for price in (100000, 120000, 140000):
        create_listing(presentPrice=price)
    for price in (90000, 110000):
        create_listing(presentPrice=price, type="Electric", engineCapacity=None, batteryCapacity="3kWh")
    sold = create_listing(presentPrice=500000)
    client.patch(f"/api/bikes/{sold['id']}/sold")
    gone = create_listing(presentPrice=1000)
    client.delete(f"/api/bikes/{gone['id']}")

    resp = client.get("/api/bikes/stats/overview")
    assert resp.status_code == 200
    stats = resp.json()["data"]
    assert stats["total"] == 6
    assert stats["available"] == 5
    assert stats["sold"] == 1
    # engine-type counts cover every active listing, sold ones included
    assert stats["petrol"] == 4
    assert stats["electric"] == 2
    assert stats["priceStats"] == {"avgPrice": 112000, "minPrice": 90000, "maxPrice": 140000}


def test_scooter_surface_mirrors_bikes(client, create_listing):
    scooter = create_listing(kind="scooters", name="Jupiter")
    resp = client.get("/api/scooters")
    assert [s["name"] for s in resp.json()["data"]["scooters"]] == ["Jupiter"]
    resp = client.patch(f"/api/scooters/{scooter['id']}/sold")
    assert resp.json()["message"] == "Scooter marked as sold successfully"
    assert client.get("/api/scooters/stats/overview").json()["data"]["sold"] == 1


def test_large_limit_returns_whole_page(client, db, listing_payload):
    doc = services.build_listing(listing_payload())
    for _ in range(105):
        crud.create_listing(db, "bike", doc)

    data = client.get("/api/bikes", params={"limit": 150}).json()["data"]
    assert len(data["bikes"]) == 105
    assert data["pagination"]["totalPages"] == 1
    assert data["pagination"]["hasNextPage"] is False


def test_uppercase_id_finds_listing(client, create_listing):
    bike = create_listing()
    resp = client.get(f"/api/bikes/{bike['id'].upper()}")
    assert resp.status_code == 200
    assert resp.json()["data"]["id"] == bike["id"]
    assert client.patch(f"/api/bikes/{bike['id'].upper()}/sold").status_code == 200
