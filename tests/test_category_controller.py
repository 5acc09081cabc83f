"""
CategoryController tests against real repositories on an in-memory database.
"""
import json
import logging

import pytest
from bson import ObjectId

from app.utils.exceptions import CategoryNotFoundError, UpstreamError, ValidationError
from app.utils.messages import Messages


async def _create(controller, name="Electronics", logo=None):
    return await controller.create_category(name=name, logo=logo)


class TestListCategories:

    @pytest.mark.asyncio
    async def test_placeholder_when_no_logo(self, controller, settings):
        await _create(controller)

        items = await controller.list_categories()

        assert len(items) == 1
        assert items[0].logo is None
        assert items[0].image_url == settings.placeholder_image_url == "/uploads/placeholder.jpg"

    @pytest.mark.asyncio
    async def test_image_url_is_logo_when_present(self, controller, make_upload):
        created = await _create(controller, logo=make_upload())

        items = await controller.list_categories()

        assert items[0].image_url == created.logo

    @pytest.mark.asyncio
    async def test_resolves_declared_references_in_order(self, controller, collections):
        sub_a, sub_b = collections["subcategories"].seed({"name": "Phones"}, {"name": "Laptops"})
        (company,) = collections["companies"].seed({"name": "Acme"})
        collections["categories"].seed({
            "name": "Electronics",
            "subcategories_id": [sub_b["_id"], ObjectId(), sub_a["_id"]],
            "companies_id": [company["_id"]],
        })

        (item,) = await controller.list_categories()

        assert [s["name"] for s in item.subcategories_id] == ["Laptops", "Phones"]
        assert [c["name"] for c in item.companies_id] == ["Acme"]
        assert item.companies_id[0]["_id"] == str(company["_id"])

    @pytest.mark.asyncio
    async def test_keeps_store_order(self, controller):
        for name in ("B", "A", "C"):
            await _create(controller, name=name)

        items = await controller.list_categories()

        assert [i.name for i in items] == ["B", "A", "C"]

    @pytest.mark.asyncio
    async def test_store_failure(self, controller, collections):
        collections["categories"].fail_on.add("find")

        with pytest.raises(UpstreamError) as exc_info:
            await controller.list_categories()

        assert exc_info.value.message == Messages.LIST_FAILED


class TestGetCategory:

    @pytest.mark.asyncio
    async def test_not_found_makes_no_writes(self, controller, fake_db):
        with pytest.raises(CategoryNotFoundError):
            await controller.get_category(str(ObjectId()))
        with pytest.raises(CategoryNotFoundError):
            await controller.get_category("not-an-object-id")

        assert fake_db.writes() == []

    @pytest.mark.asyncio
    async def test_aggregates_subcategories_and_distinct_companies(self, controller, collections):
        created = await _create(controller)
        category_oid = ObjectId(created.category_id)
        other_oid = ObjectId()

        collections["subcategories"].seed(
            {"name": "Phones", "categories_id": category_oid},
            {"name": "Tablets", "categories_id": created.category_id},
            {"name": "Sofas", "categories_id": other_oid},
        )
        acme, globex, initech = collections["companies"].seed(
            {"name": "Acme"}, {"name": "Globex"}, {"name": "Initech"}
        )
        collections["products"].seed(
            {"name": "p1", "categoriesa_id": category_oid, "Company_id": acme["_id"]},
            {"name": "p2", "categoriesa_id": category_oid, "Company_id": acme["_id"]},
            {"name": "p3", "categoriesa_id": created.category_id, "Company_id": str(acme["_id"])},
            {"name": "p4", "categoriesa_id": category_oid, "Company_id": globex["_id"]},
            {"name": "p5", "categoriesa_id": other_oid, "Company_id": initech["_id"]},
        )

        detail = await controller.get_category(created.category_id)

        assert sorted(s["name"] for s in detail.subcategories_id) == ["Phones", "Tablets"]
        assert sorted(c["name"] for c in detail.companies_id) == ["Acme", "Globex"]
        assert detail.name == "Electronics"

    @pytest.mark.asyncio
    async def test_overrides_embedded_reference_lists(self, controller, collections):
        (doc,) = collections["categories"].seed({
            "name": "Garden",
            "subcategories_id": [ObjectId()],
            "companies_id": [ObjectId()],
        })

        detail = await controller.get_category(str(doc["_id"]))

        assert detail.subcategories_id == []
        assert detail.companies_id == []

    @pytest.mark.asyncio
    async def test_store_failure_during_aggregation(self, controller, collections):
        created = await _create(controller)
        collections["products"].fail_on.add("distinct")

        with pytest.raises(UpstreamError) as exc_info:
            await controller.get_category(created.category_id)

        assert exc_info.value.message == Messages.FETCH_FAILED
        assert "distinct" in exc_info.value.detail


class TestCreateCategory:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", [None, "", "   "])
    async def test_missing_name_never_reaches_store(self, controller, fake_db, make_upload, name):
        with pytest.raises(ValidationError) as exc_info:
            await controller.create_category(name=name, logo=make_upload())

        assert str(exc_info.value) == Messages.NAME_REQUIRED
        assert fake_db.events == []

    @pytest.mark.asyncio
    async def test_without_file(self, controller):
        created = await _create(controller)

        assert created.logo is None
        assert created.logo_public_id is None
        assert created.name == "Electronics"
        assert created.id and created.id != created.category_id

    @pytest.mark.asyncio
    async def test_with_file_uses_asset_host_url(self, controller, asset_host, make_upload):
        created = await _create(controller, logo=make_upload())

        assert created.logo == "https://assets.example.test/categories/logo-1.png"
        assert created.logo_public_id == "categories/logo-1"
        assert "categories/logo-1" in asset_host.assets

    @pytest.mark.asyncio
    async def test_rejects_non_image_upload(self, controller, fake_db, make_upload):
        with pytest.raises(ValidationError):
            await _create(controller, logo=make_upload(content=b"not an image"))
        with pytest.raises(ValidationError):
            await _create(controller, logo=make_upload(content_type="application/pdf"))

        assert fake_db.events == []

    @pytest.mark.asyncio
    async def test_upload_failure(self, controller, asset_host, fake_db, make_upload):
        asset_host.fail_store = True

        with pytest.raises(UpstreamError) as exc_info:
            await _create(controller, logo=make_upload())

        assert exc_info.value.message == Messages.CREATE_FAILED
        assert exc_info.value.detail == "upload refused"
        assert fake_db.writes() == []

    @pytest.mark.asyncio
    async def test_store_failure_discards_uploaded_asset(self, controller, asset_host, collections, make_upload):
        collections["categories"].fail_on.add("insert_one")

        with pytest.raises(UpstreamError):
            await _create(controller, logo=make_upload())

        assert asset_host.deletions() == ["categories/logo-1"]
        assert asset_host.assets == {}


class TestUpdateCategory:

    @pytest.mark.asyncio
    async def test_not_found(self, controller):
        with pytest.raises(CategoryNotFoundError):
            await controller.update_category(str(ObjectId()), {"name": "x"})

    @pytest.mark.asyncio
    async def test_partial_update(self, controller):
        created = await _create(controller)

        updated = await controller.update_category(created.category_id, {"name": "Gadgets", "unknown": 1})

        assert updated.name == "Gadgets"
        assert updated.category_id == created.category_id
        assert updated.id == created.id

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, controller, fake_db):
        created = await _create(controller)
        fake_db.events.clear()

        with pytest.raises(ValidationError):
            await controller.update_category(created.category_id, {"name": "  "})

        assert fake_db.events == []

    @pytest.mark.asyncio
    async def test_new_file_replaces_old_logo_before_store_update(self, controller, asset_host, fake_db, make_upload):
        created = await _create(controller, logo=make_upload())
        fake_db.events.clear()

        updated = await controller.update_category(
            created.category_id,
            {"logo": "https://elsewhere.test/ignored.png"},
            logo=make_upload()
        )

        assert asset_host.deletions() == [created.logo_public_id]
        delete_at = fake_db.events.index(("asset.delete", created.logo_public_id))
        update_at = fake_db.events.index(("categories.update", created.category_id))
        assert delete_at < update_at
        assert updated.logo == "https://assets.example.test/categories/logo-2.png"
        assert updated.logo_public_id == "categories/logo-2"

    @pytest.mark.asyncio
    async def test_new_file_without_old_logo_deletes_nothing(self, controller, asset_host, make_upload):
        created = await _create(controller)

        updated = await controller.update_category(created.category_id, {}, logo=make_upload())

        assert asset_host.deletions() == []
        assert updated.logo_public_id == "categories/logo-1"

    @pytest.mark.asyncio
    async def test_update_without_file_keeps_logo(self, controller, asset_host, make_upload):
        created = await _create(controller, logo=make_upload())

        updated = await controller.update_category(created.category_id, {"name": "Renamed"})

        assert asset_host.deletions() == []
        assert updated.logo == created.logo

    @pytest.mark.asyncio
    async def test_clearing_logo_deletes_asset(self, controller, asset_host, make_upload):
        created = await _create(controller, logo=make_upload())

        updated = await controller.update_category(created.category_id, {"logo": None})

        assert asset_host.deletions() == [created.logo_public_id]
        assert updated.logo is None
        assert updated.logo_public_id is None

    @pytest.mark.asyncio
    async def test_old_asset_delete_failure_discards_new_upload(self, controller, asset_host, make_upload):
        created = await _create(controller, logo=make_upload())
        asset_host.fail_delete = True

        with pytest.raises(UpstreamError) as exc_info:
            await controller.update_category(created.category_id, {}, logo=make_upload())

        assert exc_info.value.message == Messages.UPDATE_FAILED
        assert asset_host.deletions() == [created.logo_public_id, "categories/logo-2"]
        unchanged = await controller.get_category(created.category_id)
        assert unchanged.logo == created.logo

    @pytest.mark.asyncio
    async def test_store_failure_clears_deleted_logo(self, controller, asset_host, collections, make_upload):
        created = await _create(controller, logo=make_upload())
        collections["categories"].fail_on.add("find_one_and_update")

        with pytest.raises(UpstreamError):
            await controller.update_category(created.category_id, {}, logo=make_upload())

        assert asset_host.deletions() == [created.logo_public_id, "categories/logo-2"]
        after = await controller.get_category(created.category_id)
        assert after.logo is None
        assert after.logo_public_id is None

    @pytest.mark.asyncio
    async def test_unmanaged_logo_is_left_alone(self, controller, asset_host, collections, make_upload):
        (doc,) = collections["categories"].seed({"name": "Legacy", "logo": "https://cdn.test/v1/legacy.png"})

        updated = await controller.update_category(str(doc["_id"]), {}, logo=make_upload())

        assert asset_host.deletions() == []
        assert updated.logo_public_id == "categories/logo-1"


class TestDeleteCategory:

    @pytest.mark.asyncio
    async def test_not_found(self, controller, asset_host):
        with pytest.raises(CategoryNotFoundError):
            await controller.delete_category(str(ObjectId()))
        assert asset_host.deletions() == []

    @pytest.mark.asyncio
    async def test_with_logo_deletes_asset_first(self, controller, asset_host, fake_db, make_upload):
        created = await _create(controller, logo=make_upload())
        fake_db.events.clear()

        await controller.delete_category(created.category_id)

        assert fake_db.events == [
            ("asset.delete", created.logo_public_id),
            ("categories.delete", created.category_id),
        ]
        with pytest.raises(CategoryNotFoundError):
            await controller.get_category(created.category_id)

    @pytest.mark.asyncio
    async def test_without_logo_makes_no_asset_calls(self, controller, asset_host):
        created = await _create(controller)

        await controller.delete_category(created.category_id)

        assert asset_host.deletions() == []

    @pytest.mark.asyncio
    async def test_asset_failure_keeps_record(self, controller, asset_host, make_upload):
        created = await _create(controller, logo=make_upload())
        asset_host.fail_delete = True

        with pytest.raises(UpstreamError) as exc_info:
            await controller.delete_category(created.category_id)

        assert exc_info.value.message == Messages.DELETE_FAILED
        still_there = await controller.get_category(created.category_id)
        assert still_there.logo == created.logo

    @pytest.mark.asyncio
    async def test_store_failure_clears_logo(self, controller, collections, make_upload):
        created = await _create(controller, logo=make_upload())
        collections["categories"].fail_on.add("delete_one")

        with pytest.raises(UpstreamError):
            await controller.delete_category(created.category_id)

        after = await controller.get_category(created.category_id)
        assert after.logo is None


class TestLogContext:

    @pytest.mark.asyncio
    async def test_asset_failure_log_carries_category_id(self, controller, asset_host, make_upload, caplog):
        created = await _create(controller, logo=make_upload())
        asset_host.fail_delete = True

        with caplog.at_level(logging.ERROR, logger="app.controllers.category_controller"):
            with pytest.raises(UpstreamError):
                await controller.update_category(created.category_id, {"logo": None})

        (record,) = [r for r in caplog.records if r.name == "app.controllers.category_controller"]
        assert record.category_id == created.category_id

    @pytest.mark.asyncio
    async def test_orphaned_asset_log_carries_asset_id(self, controller, asset_host, collections, make_upload, caplog):
        collections["categories"].fail_on.add("insert_one")
        asset_host.fail_delete = True

        with caplog.at_level(logging.ERROR, logger="app.controllers.category_controller"):
            with pytest.raises(UpstreamError):
                await _create(controller, logo=make_upload())

        orphaned = [r for r in caplog.records if hasattr(r, "asset_id")]
        assert [r.asset_id for r in orphaned] == ["categories/logo-1"]

    def test_json_lines_include_the_ids(self):
        from app.core.logging_config import JSONFormatter

        record = logging.LogRecord("catalog", logging.ERROR, __file__, 1, "boom", None, None)
        record.category_id = "abc"
        record.asset_id = "categories/logo-1"

        entry = json.loads(JSONFormatter().format(record))

        assert entry["category_id"] == "abc"
        assert entry["asset_id"] == "categories/logo-1"
