import unittest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from foodscan.api.v1.deps import get_openfoodfacts_client, get_product_pipeline
from foodscan.core.exceptions import StoreError
from foodscan.db.session import get_db
from foodscan.main import app
from foodscan.schemas.product import BulkImportResult
from foodscan.services.product_repository import ProductRepository
from tests.utils import FakeProductSource, make_normalized, make_session_factory

API = "/api/v1/products"
BARCODE = "012345678901"


class ProductsApiTestCase(unittest.TestCase):

    def setUp(self):
        self.engine, self.SessionLocal = make_session_factory()
        self.source = FakeProductSource(products={BARCODE: make_normalized()})

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_openfoodfacts_client] = lambda: self.source
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.engine.dispose()

    def seed(self, **kwargs):
        db = self.SessionLocal()
        try:
            return ProductRepository(db).create(make_normalized(**kwargs))
        finally:
            db.close()


class TestGetProductByBarcode(ProductsApiTestCase):

    def test_unknown_barcode_is_404(self):
        response = self.client.get(f"{API}/barcode/{BARCODE}")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "PRODUCT_NOT_FOUND")
        # Local lookup never reaches external sources
        self.assertEqual(self.source.fetch_calls, [])

    def test_stored_product_is_returned(self):
        self.seed()

        response = self.client.get(f"{API}/barcode/{BARCODE}")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["barcode"], BARCODE)
        self.assertEqual(body["name"], "Test Product")
        self.assertEqual(body["ingredients"], ["sugar", "salt"])

    def test_invalid_barcodes_are_rejected(self):
        for barcode in ("abc12345", "1234567", "1" * 33):
            response = self.client.get(f"{API}/barcode/{barcode}")
            self.assertEqual(response.status_code, 422, barcode)


class TestFetchProduct(ProductsApiTestCase):

    def test_fetch_stores_and_returns_product(self):
        response = self.client.post(f"{API}/barcode/{BARCODE}/fetch")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["barcode"], BARCODE)
        self.assertEqual(body["health_score"], 7)
        self.assertEqual(body["source"], "openfoodfacts")

        lookup = self.client.get(f"{API}/barcode/{BARCODE}")
        self.assertEqual(lookup.status_code, 200)
        self.assertEqual(lookup.json()["id"], body["id"])

    def test_fetch_unknown_barcode_is_404(self):
        response = self.client.post(f"{API}/barcode/99999999/fetch")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "PRODUCT_NOT_FOUND")

    def test_fetch_invalid_barcode_is_422(self):
        response = self.client.post(f"{API}/barcode/not-a-code/fetch")
        self.assertEqual(response.status_code, 422)

    def test_pipeline_failure_is_500(self):
        pipeline = MagicMock()
        pipeline.fetch_and_store_product = AsyncMock(side_effect=StoreError("database unavailable"))
        app.dependency_overrides[get_product_pipeline] = lambda: pipeline

        response = self.client.post(f"{API}/barcode/{BARCODE}/fetch")

        self.assertEqual(response.status_code, 500)
        self.assertNotIn("database unavailable", response.text)

    def test_unhandled_error_is_500(self):
        pipeline = MagicMock()
        pipeline.fetch_and_store_product = AsyncMock(side_effect=RuntimeError("boom"))
        app.dependency_overrides[get_product_pipeline] = lambda: pipeline
        client = TestClient(app, raise_server_exceptions=False)

        response = client.post(f"{API}/barcode/{BARCODE}/fetch")

        self.assertEqual(response.status_code, 500)


class TestBulkImport(ProductsApiTestCase):

    def test_imports_search_results(self):
        other = make_normalized(barcode="22222222")
        self.source.products["22222222"] = other
        self.source.search_results["snacks"] = [make_normalized(), other]
        self.seed(barcode="22222222")

        response = self.client.post(
            f"{API}/bulk-import",
            json={"search_terms": ["  snacks  "], "limit_per_term": 5},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"imported": 1, "duplicates": 1, "errors": 0, "details": []},
        )
        self.assertEqual(self.source.search_calls, [("snacks", 1, 5)])

    def test_default_limit_per_term(self):
        pipeline = MagicMock()
        pipeline.import_products_by_search = AsyncMock(return_value=BulkImportResult())
        app.dependency_overrides[get_product_pipeline] = lambda: pipeline

        response = self.client.post(f"{API}/bulk-import", json={"search_terms": ["tea"]})

        self.assertEqual(response.status_code, 200)
        pipeline.import_products_by_search.assert_awaited_once_with(["tea"], limit_per_term=10)

    def test_invalid_requests_are_rejected(self):
        invalid_payloads = [
            {"search_terms": []},
            {"search_terms": ["a", "b", "c", "d", "e", "f"]},
            {"search_terms": ["tea", "   "]},
            {"search_terms": ["tea"], "limit_per_term": 0},
            {"search_terms": ["tea"], "limit_per_term": 51},
            {},
        ]
        for payload in invalid_payloads:
            response = self.client.post(f"{API}/bulk-import", json=payload)
            self.assertEqual(response.status_code, 422, payload)

        self.assertEqual(self.source.search_calls, [])


class TestListProducts(ProductsApiTestCase):

    def test_lists_stored_products(self):
        self.seed(barcode="11111111")
        self.seed(barcode="22222222")

        response = self.client.get(API, params={"page": 1, "limit": 1})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["total"], 2)
        self.assertEqual(body["page"], 1)
        self.assertEqual(body["limit"], 1)
        self.assertEqual(len(body["products"]), 1)

    def test_page_size_is_bounded(self):
        response = self.client.get(API, params={"limit": 500})
        self.assertEqual(response.status_code, 422)


class TestHealth(unittest.TestCase):

    def test_health_check(self):
        response = TestClient(app).get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")


if __name__ == '__main__':
    unittest.main()
