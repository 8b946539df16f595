import unittest
from datetime import timedelta
from unittest.mock import MagicMock
from uuid import uuid4

from sqlalchemy.exc import OperationalError

from foodscan.core.constants import SOURCE_MANUAL
from foodscan.core.exceptions import StoreConflictError, StoreError, StoreNotFoundError
from foodscan.schemas.product import NutritionInfo, ProductCreate, ProductUpdate
from foodscan.services.product_repository import ProductRepository
from tests.utils import make_normalized, make_session_factory


class ProductRepositoryTestCase(unittest.TestCase):

    def setUp(self):
        self.engine, SessionLocal = make_session_factory()
        self.db = SessionLocal()
        self.repository = ProductRepository(self.db)

    def tearDown(self):
        self.db.close()
        self.engine.dispose()


class TestCreateAndFind(ProductRepositoryTestCase):

    def test_create_then_find_by_barcode(self):
        data = make_normalized(
            nutrition_info=NutritionInfo(calories=120, sodium=300, serving_size="100g"),
        ).model_copy(update={"health_score": 6, "warnings": ["Contains soy - common allergen"]})

        created = self.repository.create(data)
        found = self.repository.find_by_barcode("012345678901")

        self.assertIsNotNone(created.id)
        self.assertIsNotNone(created.created_at)
        self.assertIsNotNone(created.updated_at)
        self.assertEqual(found.id, created.id)
        self.assertEqual(found.ingredients, ["sugar", "salt"])
        self.assertEqual(found.health_score, 6)
        self.assertEqual(found.warnings, ["Contains soy - common allergen"])
        # Unknown nutrients are omitted rather than stored as null
        self.assertEqual(found.nutrition_info, {"calories": 120.0, "sodium": 300.0, "serving_size": "100g"})

    def test_find_missing_returns_none(self):
        self.assertIsNone(self.repository.find_by_barcode("99999999"))
        self.assertIsNone(self.repository.get_by_id(uuid4()))

    def test_get_by_id(self):
        created = self.repository.create(make_normalized())
        self.assertEqual(self.repository.get_by_id(created.id).barcode, "012345678901")

    def test_duplicate_barcode_conflicts(self):
        self.repository.create(make_normalized(external_id="a"))

        with self.assertRaises(StoreConflictError):
            self.repository.create(make_normalized(external_id="b"))

        # Session is usable again after the rollback
        self.assertEqual(self.repository.count(), 1)

    def test_duplicate_source_external_id_conflicts(self):
        self.repository.create(make_normalized(barcode="11111111", external_id="shared"))

        with self.assertRaises(StoreConflictError):
            self.repository.create(make_normalized(barcode="22222222", external_id="shared"))

    def test_same_external_id_from_different_sources_is_allowed(self):
        self.repository.create(make_normalized(barcode="11111111", external_id="shared"))
        self.repository.create(
            make_normalized(barcode="22222222", external_id="shared", source=SOURCE_MANUAL)
        )
        self.assertEqual(self.repository.count(), 2)

    def test_products_without_external_id_never_collide(self):
        self.repository.create(ProductCreate(barcode="11111111", name="First", source=SOURCE_MANUAL))
        self.repository.create(ProductCreate(barcode="22222222", name="Second", source=SOURCE_MANUAL))
        self.repository.create(make_normalized(barcode="33333333", external_id=""))
        self.repository.create(make_normalized(barcode="44444444", external_id=""))

        self.assertEqual(self.repository.count(), 4)
        self.assertIsNone(self.repository.find_by_barcode("33333333").external_id)

    def test_manual_product_defaults(self):
        created = self.repository.create(ProductCreate(barcode="11111111", name="Homemade jam"))

        self.assertEqual(created.source, SOURCE_MANUAL)
        self.assertEqual(created.ingredients, [])
        self.assertEqual(created.warnings, [])
        self.assertIsNone(created.health_score)
        self.assertIsNone(created.nutrition_info)


class TestUpdate(ProductRepositoryTestCase):

    def test_update_merges_fields_and_bumps_updated_at(self):
        created = self.repository.create(make_normalized())
        stale_updated_at = created.updated_at - timedelta(minutes=5)
        created.updated_at = stale_updated_at
        self.db.commit()

        updated = self.repository.update(
            created.id,
            ProductUpdate(name="Renamed", health_score=3, nutrition_info=NutritionInfo(sugars=30)),
        )

        self.assertEqual(updated.name, "Renamed")
        self.assertEqual(updated.health_score, 3)
        self.assertEqual(updated.nutrition_info, {"sugars": 30.0})
        # Untouched fields stay as they were
        self.assertEqual(updated.barcode, "012345678901")
        self.assertEqual(updated.ingredients, ["sugar", "salt"])
        self.assertGreater(updated.updated_at, stale_updated_at)

    def test_update_missing_product(self):
        with self.assertRaises(StoreNotFoundError):
            self.repository.update(uuid4(), ProductUpdate(name="Ghost"))

    def test_update_into_existing_external_id_conflicts(self):
        self.repository.create(make_normalized(barcode="11111111", external_id="one"))
        second = self.repository.create(make_normalized(barcode="22222222", external_id="two"))

        with self.assertRaises(StoreConflictError):
            self.repository.update(second.id, ProductUpdate(external_id="one"))


class TestFindOrCreate(ProductRepositoryTestCase):

    def test_returns_existing_product(self):
        first = self.repository.find_or_create("012345678901", make_normalized())
        second = self.repository.find_or_create("012345678901", make_normalized(name="Other"))

        self.assertEqual(first.id, second.id)
        self.assertEqual(second.name, "Test Product")
        self.assertEqual(self.repository.count(), 1)


class TestListPaginated(ProductRepositoryTestCase):

    def test_newest_first_with_paging(self):
        barcodes = ["11111111", "22222222", "33333333"]
        created = [self.repository.create(make_normalized(barcode=b)) for b in barcodes]
        # Spread creation times so ordering does not depend on clock resolution
        for offset, product in enumerate(created):
            product.created_at = product.created_at + timedelta(seconds=offset)
        self.db.commit()

        first_page = self.repository.list_paginated(page=1, limit=2)
        second_page = self.repository.list_paginated(page=2, limit=2)

        self.assertEqual([p.barcode for p in first_page], ["33333333", "22222222"])
        self.assertEqual([p.barcode for p in second_page], ["11111111"])
        self.assertEqual(self.repository.count(), 3)

    def test_out_of_range_arguments_are_clamped(self):
        self.repository.create(make_normalized())
        self.assertEqual(len(self.repository.list_paginated(page=0, limit=0)), 1)


class TestStoreFailures(unittest.TestCase):

    def test_database_errors_become_store_errors(self):
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT 1", {}, Exception("connection lost"))
        repository = ProductRepository(db)

        with self.assertRaises(StoreError) as ctx:
            repository.find_by_barcode("012345678901")

        self.assertNotIsInstance(ctx.exception, StoreConflictError)
        self.assertEqual(ctx.exception.context["barcode"], "012345678901")

    def test_commit_failure_rolls_back(self):
        db = MagicMock()
        db.commit.side_effect = OperationalError("INSERT", {}, Exception("disk full"))
        repository = ProductRepository(db)

        with self.assertRaises(StoreError):
            repository.create(make_normalized())

        db.rollback.assert_called_once()


if __name__ == '__main__':
    unittest.main()
