"""
Backend adapters against a fake server built on httpx.MockTransport.
"""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import httpx
import pytest

from washbook.application.exceptions import NetworkError, ServerError
from washbook.domain.entities.order import OrderRequest, OrderState
from washbook.domain.entities.vehicle import VehicleInput
from washbook.domain.entities.vehicle_image import PendingImage
from washbook.infrastructure.backend.adapters import (
    HttpAddressProvider,
    HttpImageStore,
    HttpOrderStore,
    HttpServiceCatalog,
    HttpVehicleStore,
)
from washbook.infrastructure.backend.client import BackendClient, strip_prefix, with_prefix

from tests.conftest import make_address

ADDRESS_JSON = {
    "id": "addr-1",
    "name": "Home",
    "formattedAddress": "Moda Cd. 1, Kadıköy",
    "latitude": 40.98,
    "longitude": 29.02,
    "district": "Kadıköy",
    "city": "İstanbul",
    "postalCode": "34710",
}

ORDER_JSON = {
    "id": "order-1",
    "address": ADDRESS_JSON,
    "car": "car:car-1",
    "reservationTime": "2026-10-20T10:00:00+03:00",
    "washPackages": ["washpackage:A"],
    "owner": "customer:cust-1",
    "state": "pending_approval",
    "totalPrice": "170.00",
}


def _client(handler) -> BackendClient:
    return BackendClient(
        base_url="https://api.test",
        api_token="secret",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


def test_prefix_helpers():
    assert with_prefix("car-1", "car") == "car:car-1"
    assert with_prefix("car:car-1", "car") == "car:car-1"
    assert strip_prefix("washpackage:A", "washpackage") == "A"
    assert strip_prefix("A", "washpackage") == "A"


@pytest.mark.asyncio
async def test_service_catalog_unwraps_data_items():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/wash-packages"
        assert request.headers["Authorization"] == "Bearer secret"
        return httpx.Response(
            200,
            json=[{"data": {"id": "washpackage:A", "name": "Exterior", "price": 100, "details": "Hand wash"}}],
        )

    services = await HttpServiceCatalog(_client(handler)).list()

    assert len(services) == 1
    assert services[0].id == "A"
    assert services[0].title == "Exterior"
    assert services[0].price == Decimal("100")


@pytest.mark.asyncio
async def test_vehicle_store_filters_by_owner_and_sends_prefixed_owner():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        vehicle = {
            "id": "car:car-1",
            "model": "Egea",
            "plate": "34 A 1234",
            "brand": {"name": "Fiat"},
            "owner": "customer:cust-1",
            "images": [{"id": "img-1", "url": "https://cdn.test/1.jpg", "filename": "interior_1.jpg"}],
        }
        if request.method == "GET":
            return httpx.Response(200, json={"data": [vehicle]})
        return httpx.Response(201, json={"data": vehicle})

    store = HttpVehicleStore(_client(handler))
    vehicles = await store.list("cust-1")
    created = await store.create("cust-1", VehicleInput(brand="Fiat", model="Egea", plate="34 A 1234"))

    assert seen[0].url.params["query"] == "owner==customer:cust-1"
    assert json.loads(seen[1].content)["owner"] == "customer:cust-1"
    assert vehicles[0].id == "car-1"
    assert vehicles[0].owner_id == "cust-1"
    assert vehicles[0].images[0].filename == "interior_1.jpg"
    assert created.brand == "Fiat"


@pytest.mark.asyncio
async def test_address_provider_reads_customer_and_deletes_with_body():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "GET":
            return httpx.Response(200, json={"data": {"id": "cust-1", "addresses": [ADDRESS_JSON]}})
        return httpx.Response(204)

    provider = HttpAddressProvider(_client(handler))
    addresses = await provider.list("cust-1")
    await provider.delete("cust-1", "addr-1")

    assert addresses[0].formatted_address == "Moda Cd. 1, Kadıköy"
    assert addresses[0].postal_code == "34710"
    assert seen[1].method == "DELETE"
    assert seen[1].url.path == "/customers/cust-1/address"
    assert json.loads(seen[1].content) == {"id": "addr-1"}


@pytest.mark.asyncio
async def test_image_upload_is_one_multipart_batch():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "data": [
                    {"id": "img-1", "url": "https://cdn.test/1.jpg", "filename": "a.jpg"},
                    {"id": "img-2", "url": "https://cdn.test/2.jpg", "filename": "b.jpg"},
                ]
            },
        )

    store = HttpImageStore(_client(handler))
    uploaded = await store.upload(
        "car-1",
        [PendingImage(filename="a.jpg", content=b"aaa"), PendingImage(filename="b.jpg", content=b"bbb")],
    )

    assert len(seen) == 1
    assert seen[0].url.path == "/cars/car-1/images/batch"
    assert seen[0].headers["Content-Type"].startswith("multipart/form-data")
    assert b'name="files"; filename="a.jpg"' in seen[0].content
    assert [i.id for i in uploaded] == ["img-1", "img-2"]


@pytest.mark.asyncio
async def test_image_delete_treats_missing_as_deleted():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Image not found"})

    await HttpImageStore(_client(handler)).delete("car-1", "img-1")


@pytest.mark.asyncio
async def test_order_store_round_trip():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": [ORDER_JSON]} if request.method == "GET" else {"data": ORDER_JSON})

    store = HttpOrderStore(_client(handler))
    request = OrderRequest(
        vehicle_id="car-1",
        address=make_address("addr-1"),
        reservation_time=datetime(2026, 10, 20, 10, 0, tzinfo=ZoneInfo("Europe/Istanbul")),
        service_ids=("A",),
        total_amount=Decimal("150"),
        travel_fee=Decimal("20"),
    )

    order = await store.create(request, "cust-1")
    listed = await store.list("cust-1", OrderState.PENDING_APPROVAL)
    await store.update_state("order-1", OrderState.CANCELED)

    body = json.loads(seen[0].content)
    assert body["car"] == "car:car-1"
    assert body["washPackages"] == ["washpackage:A"]
    assert body["owner"] == "customer:cust-1"
    assert body["reservationTime"] == "2026-10-20T10:00:00+03:00"
    assert body["totalPrice"] == "170"
    assert seen[1].url.params["query"] == "owner==customer:cust-1;state==PENDING_APPROVAL"
    assert json.loads(seen[2].content) == {"state": "canceled"}

    assert order.vehicle_id == "car-1"
    assert order.service_ids == ("A",)
    assert order.state is OrderState.PENDING_APPROVAL
    assert order.total_price == Decimal("170.00")
    assert listed == [order]


@pytest.mark.asyncio
async def test_error_status_becomes_server_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "Database unavailable"})

    with pytest.raises(ServerError) as exc_info:
        await HttpServiceCatalog(_client(handler)).list()

    assert exc_info.value.status_code == 500
    assert str(exc_info.value) == "Database unavailable"


@pytest.mark.asyncio
async def test_malformed_payload_becomes_server_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    with pytest.raises(ServerError, match="Unreadable"):
        await HttpServiceCatalog(_client(handler)).list()


@pytest.mark.asyncio
async def test_transport_failure_becomes_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError):
        await HttpServiceCatalog(_client(handler)).list()
