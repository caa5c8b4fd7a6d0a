"""End-to-end tests through the ASGI interface."""

import logging
from typing import Any

import pytest

from tern import App, AppConfig, Controller, api
from tern.errors import ConfigurationError
from tern.testing import TestClient

PROFILE_PARAMS = [
    {"type": "object", "properties": {"age": {"type": "number"}}},
    {"type": "number"},
]


class Profiles(Controller):
    @api("GET", params=PROFILE_PARAMS)
    def apis(self, profile, bonus, context):
        context.data(profile["age"] + bonus)

    @api("POST", params=[{"type": "string", "minLength": 1}])
    def rename(self, name, context):
        context.data({"name": name})

    @api("DELETE")
    def forget(self, context):
        pass

    @api()
    def broken(self, context):
        raise ValueError("boom")

    @api()
    def teapot(self, context):
        context.error("short and stout", status=418)


def make_app(config: AppConfig | None = None) -> App:
    app = App(config)
    app.mount(Profiles)
    return app


class TestResponses:
    @pytest.mark.asyncio
    async def test_success(self) -> None:
        async with TestClient(make_app()) as client:
            response = await client.call("/api/Profiles/apis", {"age": 30}, 12)
        assert response.status == 200
        assert response.content_type == "application/json"
        assert response.json == {"data": 42}

    @pytest.mark.asyncio
    async def test_post_body(self) -> None:
        async with TestClient(make_app()) as client:
            response = await client.call("/api/Profiles/rename", "Ada", verb="POST")
        assert response.json == {"data": {"name": "Ada"}}

    @pytest.mark.asyncio
    async def test_post_helper(self) -> None:
        async with TestClient(make_app()) as client:
            response = await client.post("/api/Profiles/rename", json={"args": ["Bo"]})
        assert response.json == {"data": {"name": "Bo"}}

    @pytest.mark.asyncio
    async def test_validation_failure(self) -> None:
        async with TestClient(make_app()) as client:
            response = await client.call("/api/Profiles/apis", {"age": "x"}, 10)
        assert response.status == 422
        assert response.json == {
            "fieldsError": [{"dataPath": "[0].age", "message": "should be number"}]
        }

    @pytest.mark.asyncio
    async def test_validation_failure_localized(self) -> None:
        async with TestClient(make_app()) as client:
            response = await client.call(
                "/api/Profiles/rename", "", verb="POST", headers={"Accept-Language": "zh"}
            )
        assert response.status == 422
        assert response.json["fieldsError"][0]["message"] == "不应少于 1 个字符"

    @pytest.mark.asyncio
    async def test_configured_locale(self) -> None:
        async with TestClient(make_app(AppConfig(locale="zh"))) as client:
            response = await client.call("/api/Profiles/apis", {"age": "x"}, 10)
        assert response.json["fieldsError"][0]["message"] == "应当是 number 类型"

    @pytest.mark.asyncio
    async def test_wrong_argument_count(self) -> None:
        async with TestClient(make_app()) as client:
            response = await client.call("/api/Profiles/apis", {"age": 1})
        assert response.status == 400
        assert response.json == {
            "error": "Wrong parameter count for /api/Profiles/apis: expected 2, got 1"
        }

    @pytest.mark.asyncio
    async def test_malformed_args(self) -> None:
        async with TestClient(make_app()) as client:
            response = await client.get("/api/Profiles/apis", query={"args": "{"})
        assert response.status == 400
        assert "not valid JSON" in response.json["error"]

    @pytest.mark.asyncio
    async def test_non_array_args_rejected_for_zero_arity(self) -> None:
        async with TestClient(make_app()) as client:
            response = await client.request(
                "DELETE",
                "/api/Profiles/forget",
                headers={"content-type": "application/json"},
                body=b'{"args": {}}',
            )
        assert response.status == 400
        assert "JSON array" in response.json["error"]

    @pytest.mark.asyncio
    async def test_no_output_is_204(self) -> None:
        async with TestClient(make_app()) as client:
            response = await client.call("/api/Profiles/forget", verb="DELETE")
        assert response.status == 204
        assert response.body == b""
        assert response.headers["content-length"] == "0"

    @pytest.mark.asyncio
    async def test_custom_error_status(self) -> None:
        async with TestClient(make_app()) as client:
            response = await client.call("/api/Profiles/teapot")
        assert response.status == 418
        assert response.json == {"error": "short and stout"}


class TestRoutingErrors:
    @pytest.mark.asyncio
    async def test_not_found(self) -> None:
        async with TestClient(make_app()) as client:
            response = await client.get("/api/Profiles/missing")
        assert response.status == 404
        assert "/api/Profiles/missing" in response.json["error"]

    @pytest.mark.asyncio
    async def test_method_not_allowed(self) -> None:
        async with TestClient(make_app()) as client:
            response = await client.call("/api/Profiles/rename", "x", verb="GET")
        assert response.status == 405
        assert response.headers["allow"] == "POST"
        assert response.json == {"error": "Method not allowed. Allowed methods: POST"}


class TestServerErrors:
    @pytest.mark.asyncio
    async def test_unhandled_exception(self, caplog: pytest.LogCaptureFixture) -> None:
        async with TestClient(make_app()) as client:
            with caplog.at_level(logging.ERROR, logger="tern.server"):
                response = await client.call("/api/Profiles/broken")
        assert response.status == 500
        assert response.json == {"error": "Internal Server Error"}
        assert "500 GET /api/Profiles/broken" in caplog.text

    @pytest.mark.asyncio
    async def test_debug_exposes_exception(self) -> None:
        async with TestClient(make_app(AppConfig(debug=True))) as client:
            response = await client.call("/api/Profiles/broken")
        assert response.status == 500
        assert response.json == {"error": "ValueError: boom"}


class TestClientScript:
    @pytest.mark.asyncio
    async def test_served_at_configured_path(self) -> None:
        async with TestClient(make_app()) as client:
            response = await client.get("/api/__client__.js")
        assert response.status == 200
        assert response.content_type.startswith("text/javascript")
        assert 'window[API_KEY]["/api/Profiles/apis"]' in response.text
        assert "parameterCount: 2" in response.text

    @pytest.mark.asyncio
    async def test_custom_path_and_table(self) -> None:
        config = AppConfig(client_script_path="/rpc.js", client_table="rpc")
        async with TestClient(make_app(config)) as client:
            response = await client.get("/rpc.js")
        assert 'var API_KEY = "rpc";' in response.text

    def test_endpoint_scripts_keep_default_table(self) -> None:
        app = make_app(AppConfig(client_table="rpc"))
        assert 'var API_KEY = "rpc";' in app.client_script()
        for endpoint in app.endpoints:
            assert endpoint.client_script.startswith('var API_KEY = "__api__";')

    def test_manifest(self) -> None:
        manifest = make_app().client_manifest()
        assert manifest["/api/Profiles/apis"] == {"verb": "GET", "parameterCount": 2}
        assert manifest["/api/Profiles/rename"] == {"verb": "POST", "parameterCount": 1}


class TestMount:
    def test_mount_class_returns_instance(self) -> None:
        app = App()
        controller = app.mount(Profiles)
        assert isinstance(controller, Profiles)
        assert app.controllers == (controller,)

    def test_mount_instance(self) -> None:
        app = App()
        controller = Profiles()
        assert app.mount(controller) is controller

    def test_rejects_non_controller(self) -> None:
        with pytest.raises(ConfigurationError):
            App().mount(object)  # type: ignore[arg-type]
        with pytest.raises(ConfigurationError):
            App().mount(object())  # type: ignore[arg-type]

    def test_no_mount_after_freeze(self) -> None:
        app = make_app()
        app.client_script()
        with pytest.raises(RuntimeError, match="after the app has started"):
            app.mount(Profiles)

    def test_duplicate_paths_fail_on_freeze(self) -> None:
        app = App()
        app.mount(Profiles)
        app.mount(Profiles)
        with pytest.raises(ConfigurationError, match="Duplicate endpoint"):
            app.client_script()

    def test_inherited_endpoints_are_served(self) -> None:
        class Admin(Profiles):
            @api("POST")
            def promote(self, user, context):
                context.data(user)

        app = App()
        app.mount(Admin)
        paths = {endpoint.path for endpoint in app.endpoints}
        assert "/api/Profiles/apis" in paths
        assert "/api/Admin/promote" in paths


class TestLifespan:
    async def _lifespan(self, app: App) -> list[dict[str, Any]]:
        incoming = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return incoming.pop(0)

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)
        return sent

    @pytest.mark.asyncio
    async def test_startup_and_shutdown(self) -> None:
        sent = await self._lifespan(make_app())
        assert [message["type"] for message in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]

    @pytest.mark.asyncio
    async def test_startup_fails_on_bad_configuration(self) -> None:
        app = App()
        app.mount(Profiles)
        app.mount(Profiles())
        sent = await self._lifespan(app)
        assert sent[0]["type"] == "lifespan.startup.failed"
        assert "Duplicate endpoint" in sent[0]["message"]

    @pytest.mark.asyncio
    async def test_startup_fails_on_any_freeze_error(self) -> None:
        class Unreadable(Controller):
            @property
            def api_info_map(self):
                raise RuntimeError("registry unavailable")

        app = App()
        app.mount(Unreadable)
        sent = await self._lifespan(app)
        assert sent == [{"type": "lifespan.startup.failed", "message": "registry unavailable"}]
