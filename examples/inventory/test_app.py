"""Tests for the inventory example — inheritance, validation, verbs."""

from tern.testing import TestClient


class TestCatalog:
    """Endpoints declared on Catalog, served through Warehouse."""

    async def test_lookup(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.call("/api/Catalog/lookup", "sku-1")
            assert response.status == 200
            assert response.json["data"]["name"] == "Lantern"

    async def test_lookup_unknown(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.call("/api/Catalog/lookup", "sku-99")
            assert response.status == 404
            assert response.json == {"error": "Unknown SKU sku-99"}

    async def test_lookup_rejects_bad_sku(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.call("/api/Catalog/lookup", "lantern")
            assert response.status == 422
            [error] = response.json["fieldsError"]
            assert error["dataPath"] == "[0]"
            assert error["message"] == 'should match pattern "^sku-[0-9]+$"'

    async def test_search(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.call("/api/Catalog/search", {"maxPrice": 10})
            assert [i["sku"] for i in response.json["data"]] == ["sku-2", "sku-3"]

            response = await client.call("/api/Catalog/search", {"inStock": True})
            assert [i["sku"] for i in response.json["data"]] == ["sku-3", "sku-1"]

    async def test_search_rejects_unknown_filter(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.call("/api/Catalog/search", {"color": "red"})
            assert response.status == 422
            assert response.json["fieldsError"][0]["message"] == (
                "should NOT have additional properties"
            )


class TestWarehouse:
    """Endpoints added by the Warehouse subclass."""

    async def test_restock(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.call("/api/Warehouse/restock", "sku-2", 3, verb="POST")
            assert response.status == 200
            assert response.json["data"]["quantity"] == 3

    async def test_restock_validates_every_argument(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.call(
                "/api/Warehouse/restock",
                "bad",
                0,
                verb="POST",
                headers={"Accept-Language": "zh-CN"},
            )
            assert response.status == 422
            errors = response.json["fieldsError"]
            assert [e["dataPath"] for e in errors] == ["[0]", "[1]"]
            assert errors[1]["message"] == "应当 >= 1"

    async def test_restock_wrong_verb(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.call("/api/Warehouse/restock", "sku-2", 3)
            assert response.status == 405
            assert response.headers["allow"] == "POST"

    async def test_discontinue(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.call("/api/Warehouse/discontinue", "sku-3", verb="DELETE")
            assert response.status == 204

            response = await client.call("/api/Catalog/lookup", "sku-3")
            assert response.status == 404


class TestClientScript:
    async def test_lists_inherited_and_own_endpoints(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/api/__client__.js")
            for path in (
                "/api/Catalog/lookup",
                "/api/Catalog/search",
                "/api/Warehouse/restock",
                "/api/Warehouse/discontinue",
            ):
                assert f'window[API_KEY]["{path}"]' in response.text


class TestRegistries:
    def test_subclass_sees_parent_endpoints(self, example_module) -> None:
        warehouse = example_module.Warehouse().api_info_map
        assert list(warehouse) == ["lookup", "search", "restock", "discontinue"]
        assert warehouse["lookup"].path == "/api/Catalog/lookup"

    def test_parent_registry_untouched(self, example_module) -> None:
        assert list(example_module.Catalog().api_info_map) == ["lookup", "search"]
