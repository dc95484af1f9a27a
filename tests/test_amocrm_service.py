import json
import unittest

import httpx

from mapping.errors import ConfigurationError
from services.amocrm import (
    AmoCRMError,
    AmoCRMService,
    build_base_url,
    extract_created_id,
    extract_error_message,
)


def _service(handler, subdomain="mycompany", token="token"):
    return AmoCRMService(subdomain=subdomain, access_token=token, transport=httpx.MockTransport(handler))


class TestBaseUrl(unittest.TestCase):
    def test_clean_subdomain(self):
        self.assertEqual(build_base_url(" mycompany/ "), "https://mycompany.amocrm.ru")

    def test_missing_subdomain(self):
        for value in (None, "", "   ", "///"):
            with self.assertRaises(ConfigurationError):
                build_base_url(value)


class TestErrorMessage(unittest.TestCase):
    def test_known_keys(self):
        self.assertEqual(extract_error_message(httpx.Response(400, json={"detail": "Bad field"}), "x"), "Bad field")
        self.assertEqual(extract_error_message(httpx.Response(401, json={"title": "Unauthorized"}), "x"), "Unauthorized")

    def test_text_and_json_fallbacks(self):
        self.assertEqual(extract_error_message(httpx.Response(502, text="Bad gateway"), "x"), "Bad gateway")
        self.assertEqual(extract_error_message(httpx.Response(502, text=""), "fallback"), "fallback")
        self.assertEqual(
            extract_error_message(httpx.Response(400, json={"validation-errors": []}), "x"),
            'Ошибка API: {"validation-errors": []}',
        )

    def test_created_id(self):
        self.assertEqual(extract_created_id({"_embedded": {"leads": [{"id": 5}]}}, "leads"), 5)
        self.assertIsNone(extract_created_id({}, "leads"))

    def test_created_id_unexpected_shapes(self):
        for data in (
            [],
            "created",
            {"_embedded": "oops"},
            {"_embedded": {"leads": "oops"}},
            {"_embedded": {"leads": []}},
            {"_embedded": {"leads": ["5"]}},
        ):
            self.assertIsNone(extract_created_id(data, "leads"))


class TestAmoCRMService(unittest.IsolatedAsyncioTestCase):
    async def test_create_contact(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"_embedded": {"contacts": [{"id": 321}]}})

        created = await _service(handler).create_contact({"name": "Иван"})

        self.assertEqual(created.id, 321)
        self.assertEqual(str(requests[0].url), "https://mycompany.amocrm.ru/api/v4/contacts")
        self.assertEqual(requests[0].headers["Authorization"], "Bearer token")
        self.assertEqual(json.loads(requests[0].content), [{"name": "Иван"}])

    async def test_unexpected_success_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"id": 1}])

        created = await _service(handler).create_contact({"name": "Иван"})

        self.assertIsNone(created.id)
        self.assertEqual(created.data, {})

    async def test_create_lead_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"title": "Bad Request", "detail": "pipeline_id is invalid"})

        with self.assertRaises(AmoCRMError) as ctx:
            await _service(handler).create_lead({"name": "x", "pipeline_id": 1})

        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(str(ctx.exception), "pipeline_id is invalid")

    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with self.assertRaises(AmoCRMError) as ctx:
            await _service(handler).create_lead({"name": "x"})
        self.assertIsNone(ctx.exception.status_code)

    async def test_missing_token_before_request(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("запрос не должен уходить")

        with self.assertRaises(ConfigurationError):
            await _service(handler, token=None).create_contact({"name": "x"})


if __name__ == "__main__":
    unittest.main()
