"""
API tests for the catalog integrity endpoints
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

API = "/api/v1"


class TestCategoryEndpoints:
    @pytest.mark.asyncio
    async def test_path(self, client: AsyncClient, category_forest):
        response = await client.post(
            f"{API}/categories/path", json={"categories": category_forest, "categoryId": " CAT-C "}
        )

        assert response.status_code == 200
        assert response.json() == {"category_id": "cat-c", "path": ["cat-a", "cat-b", "cat-c"]}

    @pytest.mark.asyncio
    async def test_path_unknown_category(self, client: AsyncClient, category_forest):
        response = await client.post(
            f"{API}/categories/path", json={"categories": category_forest, "categoryId": "cat-x"}
        )

        assert response.status_code == 404
        assert response.json()["error"]["type"] == "NotFoundError"

    @pytest.mark.asyncio
    async def test_flatten(self, client: AsyncClient, category_forest):
        response = await client.post(f"{API}/categories/flatten", json={"categories": category_forest})

        assert response.status_code == 200
        assert [row["label"] for row in response.json()] == ["Fiction", "— Classics", "—— Novellas", "Science"]

    @pytest.mark.asyncio
    async def test_legal_parents(self, client: AsyncClient, category_forest):
        response = await client.post(
            f"{API}/categories/legal-parents", json={"categories": category_forest, "excludedId": "cat-b"}
        )

        assert response.status_code == 200
        assert [row["id"] for row in response.json()] == ["cat-a", "cat-d"]

    @pytest.mark.asyncio
    async def test_reparent(self, client: AsyncClient, category_forest):
        response = await client.post(
            f"{API}/categories/reparent",
            json={"categories": category_forest, "nodeId": "cat-c", "newParentId": "cat-a"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["parent_id"] == "cat-a"
        assert data["path"] == ["cat-a", "cat-c"]
        assert [child["id"] for child in data["categories"][0]["children"]] == ["cat-b", "cat-c"]

    @pytest.mark.asyncio
    async def test_reparent_cycle(self, client: AsyncClient, category_forest):
        response = await client.post(
            f"{API}/categories/reparent",
            json={"categories": category_forest, "nodeId": "cat-a", "newParentId": "cat-c"},
        )

        assert response.status_code == 409
        data = response.json()
        assert data["error"]["type"] == "CycleError"
        assert data["request_id"]

    @pytest.mark.asyncio
    async def test_live_parent_options(self, client: AsyncClient):
        response = await client.get(f"{API}/categories/parent-options", params={"categoryId": "cat-a"})

        assert response.status_code == 200
        assert [row["id"] for row in response.json()] == ["cat-d"]

    @pytest.mark.asyncio
    async def test_live_move(self, client: AsyncClient, fake_catalog):
        response = await client.put(f"{API}/categories/cat-c/parent", json={"parentId": "cat-d"})

        assert response.status_code == 200
        assert response.json() == {"node_id": "cat-c", "parent_id": "cat-d"}
        assert fake_catalog.category_updates[0][1]["ParentId"] == "cat-d"

    @pytest.mark.asyncio
    async def test_live_move_cycle(self, client: AsyncClient, fake_catalog):
        response = await client.put(f"{API}/categories/cat-a/parent", json={"parentId": "cat-b"})

        assert response.status_code == 409
        assert fake_catalog.category_updates == []


class TestFormatEndpoints:
    @pytest.mark.asyncio
    async def test_validate_reports_all_errors(self, client: AsyncClient):
        response = await client.post(
            f"{API}/formats/validate", json={"formatType": "physical", "price": "0", "discountPrice": "5"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert [error["field"] for error in data["errors"]] == ["price", "stockQuantity", "discountPrice"]

    @pytest.mark.asyncio
    async def test_validate_unknown_format(self, client: AsyncClient):
        response = await client.post(f"{API}/formats/validate", json={"formatType": "vinyl", "price": 1})

        assert response.json()["errors"][0]["field"] == "formatType"

    @pytest.mark.asyncio
    async def test_validate_ok(self, client: AsyncClient):
        response = await client.post(
            f"{API}/formats/validate", json={"formatType": "ebook", "price": 10, "fileUrl": "https://cdn/a.pdf"}
        )

        assert response.json() == {"valid": True, "errors": []}

    @pytest.mark.asyncio
    async def test_quote_clamps_to_stock(self, client: AsyncClient):
        response = await client.post(
            f"{API}/formats/quote",
            json={
                "variant": {"formatType": "physical", "price": 100000, "discountPrice": 80000, "stockQuantity": 3},
                "quantity": 10,
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["quantity"] == 3
        assert Decimal(str(data["unit_price"])) == Decimal("80000")
        assert Decimal(str(data["amount"])) == Decimal("240000")
        assert data["label"] == "240,000 تومان"

    @pytest.mark.asyncio
    async def test_quote_out_of_stock(self, client: AsyncClient):
        response = await client.post(
            f"{API}/formats/quote",
            json={"variant": {"formatType": "physical", "price": 100, "stockQuantity": 0}, "quantity": 1},
        )

        assert response.status_code == 422
        assert response.json()["error"]["context"]["field"] == "stockQuantity"


class TestMediaEndpoints:
    @pytest.mark.asyncio
    async def test_reconcile(self, client: AsyncClient):
        persisted = [
            {"id": "m-1", "role": "cover", "title": "cover.jpg"},
            {"id": "m-2", "role": "gallery", "title": "page-1.jpg"},
        ]
        working = [
            {"id": "m-2", "role": "cover", "title": "page-1.jpg"},
            {"role": "gallery", "title": "new.jpg", "file": {"filename": "new.jpg", "contentType": "image/jpeg"}},
        ]

        response = await client.post(f"{API}/media/reconcile", json={"persisted": persisted, "working": working})

        assert response.status_code == 200
        data = response.json()
        assert [op["op"] for op in data["ops"]] == ["delete", "keep", "create"]
        assert data["ops"][1]["role"] == "cover"
        assert (data["kept"], data["created"], data["deleted"]) == (1, 1, 1)

    @pytest.mark.asyncio
    async def test_duplicate_cover(self, client: AsyncClient):
        working = [
            {"id": "m-1", "role": "cover", "title": "cover.jpg"},
            {"role": "cover", "title": "new.jpg", "file": {"filename": "new.jpg", "contentType": "image/jpeg"}},
        ]

        response = await client.post(
            f"{API}/media/reconcile",
            json={"persisted": [{"id": "m-1", "role": "cover", "title": "cover.jpg"}], "working": working},
        )

        assert response.status_code == 409
        data = response.json()
        assert data["error"]["type"] == "DuplicateRoleError"
        assert data["error"]["context"]["role"] == "cover"

    @pytest.mark.asyncio
    async def test_duplicate_cover_in_service_spelling(self, client: AsyncClient):
        persisted = [{"Id": "m-1", "MediaRole": "Cover", "MediaUrl": "https://cdn/media", "Title": "a.jpg"}]
        working = persisted + [
            {"MediaRole": "Cover", "Title": "b.jpg", "File": {"filename": "b.jpg", "contentType": "image/jpeg"}}
        ]

        response = await client.post(f"{API}/media/reconcile", json={"persisted": persisted, "working": working})

        assert response.status_code == 409
        assert response.json()["error"]["type"] == "DuplicateRoleError"

    @pytest.mark.asyncio
    async def test_missing_role_is_rejected(self, client: AsyncClient):
        response = await client.post(
            f"{API}/media/reconcile",
            json={"persisted": [{"id": "m-1", "title": "a.jpg"}], "working": []},
        )

        assert response.status_code == 422


class TestProductEndpoints:
    @pytest.mark.asyncio
    async def test_session_round_trip(self, client: AsyncClient, fake_catalog):
        response = await client.get(f"{API}/products/p-1/session")
        assert response.status_code == 200
        session = response.json()
        assert session["category_id"] == "CAT-C"

        response = await client.put(f"{API}/products/save", json=session)

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert len(fake_catalog.saved) == 1
        assert fake_catalog.saved[0].category_id == "cat-c"

    @pytest.mark.asyncio
    async def test_save_command_dry_run(self, client: AsyncClient, fake_catalog):
        session = (await client.get(f"{API}/products/p-1/session")).json()

        response = await client.post(f"{API}/products/save-command", json=session)

        assert response.status_code == 200
        data = response.json()
        assert data["category_path"] == ["cat-a", "cat-b", "cat-c"]
        assert [op["op"] for op in data["media"]] == ["keep", "keep"]
        assert fake_catalog.saved == []

    @pytest.mark.asyncio
    async def test_invalid_session_is_not_saved(self, client: AsyncClient, fake_catalog):
        session = (await client.get(f"{API}/products/p-1/session")).json()
        session["title"] = " "

        response = await client.put(f"{API}/products/save", json=session)

        assert response.status_code == 422
        assert response.json()["error"]["context"]["field"] == "title"
        assert fake_catalog.saved == []

    @pytest.mark.asyncio
    async def test_validate_lists_field_errors(self, client: AsyncClient):
        session = (await client.get(f"{API}/products/p-1/session")).json()
        session["meta_title"] = ""
        session["formats"][0]["price"] = "0"
        session["formats"][0]["discount_price"] = None

        response = await client.post(f"{API}/products/validate", json=session)

        data = response.json()
        assert data["valid"] is False
        assert [error["field"] for error in data["errors"]] == ["metaTitle", "formats[0].price"]

    @pytest.mark.asyncio
    async def test_catalog_failure(self, client: AsyncClient, fake_catalog):
        session = (await client.get(f"{API}/products/p-1/session")).json()
        fake_catalog.fail_saves = True

        response = await client.put(f"{API}/products/save", json=session)

        assert response.status_code == 503
        assert response.json()["error"]["type"] == "ExternalServiceError"
