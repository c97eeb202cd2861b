"""
Tests for ResourceController: validation, response-shape policy and
dependency-aware deletes.
"""

from unittest.mock import patch

import pytest

from scaffold_api.services.crud import (
    ControllerConfig,
    RecordResult,
    RecordsResult,
    RedirectResult,
    ResourceController,
    ResourceRequest,
    ResponseShape,
    ReturnOn,
    RuleSets,
    SuccessResult,
)
from scaffold_shared.config.settings import Settings
from scaffold_shared.utils.exceptions import DependencyBlockedError, NotFoundError, ValidationFailedError
from scaffold_api.services.crud.config import default_return_on
from tests.resources import (
    CATEGORY_CONFIG,
    CUSTOMER_CONFIG,
    PRODUCT_CONFIG,
    Category,
    Customer,
    Product,
)


@pytest.fixture
def customers(customers_repo):
    return ResourceController(customers_repo, CUSTOMER_CONFIG)


@pytest.fixture
def categories(categories_repo):
    return ResourceController(categories_repo, CATEGORY_CONFIG)


@pytest.fixture
def products(products_repo):
    return ResourceController(products_repo, PRODUCT_CONFIG)


class TestList:
    """Tests for listing."""

    def test_list_returns_native_rows_and_index_view(self, customers, seed_customers):
        result = customers.list(ResourceRequest())
        assert isinstance(result, RecordsResult)
        assert result.view == "admin.customers.index"
        assert all(isinstance(record, Customer) for record in result.records)
        assert result.pagination_info is None

    def test_request_filters_reach_the_repository(self, customers, seed_customers):
        result = customers.list(ResourceRequest(query={"email": "alan@example.com"}))
        assert [record.id for record in result.records] == [2]

    def test_static_list_options_add_pagination_info(self, products, seed_products):
        result = products.list(ResourceRequest(query={"page": "2"}))
        assert [record.id for record in result.records] == [3]
        assert result.pagination_info["total"] == 3
        assert result.pagination_info["page"] == 2

    def test_view_without_prefix(self, customers_repo):
        controller = ResourceController(customers_repo, ControllerConfig())
        assert controller.list(ResourceRequest()).view == "index"


class TestFetch:
    """Tests for fetching one record."""

    def test_fetch(self, customers, seed_customers):
        result = customers.fetch(3)
        assert isinstance(result, RecordResult)
        assert result.record.email == "grace@example.com"

    def test_fetch_accepts_string_ids(self, customers, seed_customers):
        assert customers.fetch("1").record.id == 1

    def test_fetch_missing(self, customers, seed_customers):
        with pytest.raises(NotFoundError) as exc_info:
            customers.fetch(99)
        assert exc_info.value.entity_id == 99


class TestCreate:
    """Tests for create."""

    def test_create_single_record(self, customers, db_session):
        result = customers.create(ResourceRequest(data={"name": "Ada", "email": "ada@example.com"}))
        assert isinstance(result, RecordResult)
        assert result.record.name == "Ada"
        assert db_session.query(Customer).count() == 1

    def test_create_validation_failure_does_not_write(self, customers, db_session):
        with pytest.raises(ValidationFailedError) as exc_info:
            customers.create(ResourceRequest(data={"email": "broken"}))

        assert set(exc_info.value.errors) == {"name", "email"}
        assert exc_info.value.status_code == 400
        assert db_session.query(Customer).count() == 0

    def test_create_unique_against_own_table(self, customers, seed_customers):
        with pytest.raises(ValidationFailedError) as exc_info:
            customers.create(ResourceRequest(data={"name": "Ada", "email": "ada@example.com"}))
        assert exc_info.value.errors == {"email": ["The email has already been taken."]}

    def test_create_list_value_for_unique_field(self, customers, seed_customers):
        with pytest.raises(ValidationFailedError) as exc_info:
            customers.create(ResourceRequest(data={"name": "Ada", "email": ["x@y.com", "z@y.com"]}))
        assert "email" in exc_info.value.errors

    def test_create_all_records(self, products, seed_category):
        result = products.create(
            ResourceRequest(data={"name": "Water", "category_id": 1, "price_cents": 100})
        )
        assert isinstance(result, RecordsResult)
        assert result.view == "admin.products.index"
        assert [record.name for record in result.records] == ["Water"]
        assert result.pagination_info["total"] == 1

    def test_create_exists_rule(self, products, seed_category):
        with pytest.raises(ValidationFailedError) as exc_info:
            products.create(ResourceRequest(data={"name": "Water", "category_id": 9, "price_cents": 100}))
        assert list(exc_info.value.errors) == ["category_id"]

    def test_create_redirect(self, categories, db_session):
        result = categories.create(ResourceRequest(data={"name": "Snacks"}, back_url="/admin/categories"))
        assert result == RedirectResult(url="/admin/categories")
        assert db_session.query(Category).count() == 1

    def test_store_rules_hook(self, customers_repo, db_session):
        class StrictCustomers(ResourceController):
            def store_rules(self, request):
                return {**self.config.rules.store, "name": "required|min:5"}

        controller = StrictCustomers(customers_repo, CUSTOMER_CONFIG)
        with pytest.raises(ValidationFailedError) as exc_info:
            controller.create(ResourceRequest(data={"name": "Ada", "email": "ada@example.com"}))
        assert list(exc_info.value.errors) == ["name"]


class TestUpdate:
    """Tests for update."""

    def test_update_keeping_own_email(self, customers, seed_customers):
        result = customers.update(3, ResourceRequest(data={"name": "Rear Admiral Hopper", "email": "grace@example.com"}))
        assert isinstance(result, RecordResult)
        assert result.record.name == "Rear Admiral Hopper"

    def test_update_taking_another_email(self, customers, db_session, seed_customers):
        with pytest.raises(ValidationFailedError) as exc_info:
            customers.update(3, ResourceRequest(data={"name": "Grace", "email": "ada@example.com"}))

        assert exc_info.value.errors == {"email": ["The email has already been taken."]}
        db_session.expire_all()
        assert db_session.get(Customer, 3).name == "Grace Hopper"

    def test_update_missing(self, customers, seed_customers):
        with pytest.raises(NotFoundError):
            customers.update(99, ResourceRequest(data={"name": "Nobody", "email": "no@example.com"}))

    def test_update_all_records(self, products, seed_products):
        result = products.update(
            2, ResourceRequest(data={"name": "Cola", "category_id": 1, "price_cents": 260})
        )
        assert isinstance(result, RecordsResult)
        assert [record.name for record in result.records] == ["Water", "Cola"]

    def test_update_redirect_policy_answers_success(self, categories, seed_category):
        result = categories.update(1, ResourceRequest(data={"name": "Beverages"}))
        assert result == SuccessResult()

    def test_update_rules_hook_receives_id(self, customers_repo, seed_customers):
        seen = []

        class Tracking(ResourceController):
            def update_rules(self, entity_id, request):
                seen.append(entity_id)
                return super().update_rules(entity_id, request)

        Tracking(customers_repo, CUSTOMER_CONFIG).update(
            2, ResourceRequest(data={"name": "Alan", "email": "alan@example.com"})
        )
        assert seen == [2]


class TestDestroy:
    """Tests for destroy."""

    def test_destroy_ajax(self, customers, db_session, seed_customers):
        result = customers.destroy(2, ResourceRequest(is_ajax=True))
        assert result == SuccessResult()
        assert db_session.get(Customer, 2) is None

    def test_destroy_redirects_back(self, customers, seed_customers):
        result = customers.destroy(2, ResourceRequest(back_url="/admin/customers"))
        assert result == RedirectResult(url="/admin/customers")

    def test_destroy_blocked_by_orders(self, customers, db_session, seed_order):
        with pytest.raises(DependencyBlockedError) as exc_info:
            customers.destroy(1, ResourceRequest(is_ajax=True))

        assert exc_info.value.messages == ["has orders"]
        assert exc_info.value.detail["errors"] == ["has orders"]
        assert db_session.get(Customer, 1) is not None

    def test_destroy_succeeds_once_dependency_is_removed(self, customers, customers_repo, db_session, seed_order):
        with pytest.raises(DependencyBlockedError) as exc_info:
            customers.destroy(1, ResourceRequest(is_ajax=True))
        assert exc_info.value.messages == ["has orders"]

        db_session.delete(seed_order)
        db_session.commit()

        assert customers.destroy(1, ResourceRequest(is_ajax=True)) == SuccessResult()
        assert customers_repo.has(1) is False

    def test_destroy_reports_every_blocking_dependency(self, customers, seed_order, seed_invoice):
        with pytest.raises(DependencyBlockedError) as exc_info:
            customers.destroy(1, ResourceRequest())
        assert exc_info.value.messages == ["has orders", "has invoices"]

    def test_destroy_ignores_soft_deleted_references(self, categories, db_session, seed_products):
        for product in seed_products:
            product.soft_delete()
        db_session.commit()

        result = categories.destroy(1, ResourceRequest(is_ajax=True))
        assert result == SuccessResult()
        assert db_session.get(Category, 1).is_deleted

    def test_guard_not_invoked_without_descriptors(self, products, db_session, seed_products):
        with patch.object(products.dependency_guard, "check") as check:
            products.destroy(1, ResourceRequest(is_ajax=True))
        check.assert_not_called()
        assert db_session.get(Product, 1).is_deleted

    def test_destroy_missing(self, customers, seed_customers):
        with pytest.raises(NotFoundError):
            customers.destroy(42, ResourceRequest(is_ajax=True))


class TestResponseShapeDefaults:
    """Unset return_on entries fall back to the process-wide defaults."""

    def test_defaults_fill_unset_entries(self, customers_repo):
        config = ControllerConfig(return_on=ReturnOn(update="all-records"))
        controller = ResourceController(
            customers_repo, config, defaults=ReturnOn(store=ResponseShape.REDIRECT)
        )
        assert controller.return_on == ReturnOn(
            store=ResponseShape.REDIRECT, update=ResponseShape.ALL_RECORDS
        )

    def test_single_record_when_nothing_is_set(self, customers_repo):
        controller = ResourceController(customers_repo, ControllerConfig(), defaults=ReturnOn())
        assert controller.return_on.store == ResponseShape.SINGLE_RECORD
        assert controller.return_on.update == ResponseShape.SINGLE_RECORD

    def test_defaults_from_settings(self):
        defaults = default_return_on(Settings(return_on_store="redirect", return_on_update="all-records"))
        assert defaults == ReturnOn(store="redirect", update="all-records")

    def test_unknown_shape_is_rejected(self):
        with pytest.raises(ValueError):
            ReturnOn(store="sideways")

    def test_default_redirect_applies_to_create(self, customers_repo, db_session):
        config = ControllerConfig(rules=RuleSets(all={"name": "required"}))
        controller = ResourceController(customers_repo, config, defaults=ReturnOn(store="redirect"))
        result = controller.create(
            ResourceRequest(data={"name": "Ada", "email": "ada@example.com"}, back_url="/back")
        )
        assert result == RedirectResult(url="/back")
