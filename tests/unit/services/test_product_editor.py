"""
Tests for the product edit orchestrator and the category editor
"""

from decimal import Decimal

import pytest
import pytest_asyncio

from bookcatalog.core.exceptions import (
    CycleError,
    DuplicateRoleError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)
from bookcatalog.schemas.media import CreateMedia, KeepMedia, MediaItem, MediaRole
from bookcatalog.schemas.product import FormatType, ProductVariant
from bookcatalog.services.category_editor import CategoryEditor
from bookcatalog.services.product_editor import ProductEditor

from tests.fakes import EDIT_MODEL, FakeCatalogService


@pytest.fixture
def editor(fake_catalog):
    return ProductEditor(fake_catalog)


@pytest_asyncio.fixture
async def session(editor):
    return await editor.load("p-1")


class TestLoad:
    @pytest.mark.asyncio
    async def test_narrows_the_edit_model(self, session):
        assert session.product_id == "p-1"
        assert session.title == "The Little Prince"
        assert session.pages == 96
        assert session.category_id == "CAT-C"
        assert session.publisher_id == "pub-1"

    @pytest.mark.asyncio
    async def test_unknown_format_types_are_dropped(self, session):
        assert [variant.format_type for variant in session.formats] == [FormatType.PHYSICAL, FormatType.EBOOK]
        assert session.formats[0].discount_price == Decimal("80000")

    @pytest.mark.asyncio
    async def test_only_known_authors_are_kept(self, session):
        assert [author.author_id for author in session.authors] == ["auth-1"]

    @pytest.mark.asyncio
    async def test_media_and_tags(self, session):
        assert [item.id for item in session.persisted_media] == ["m-1", "m-2"]
        assert session.media == session.persisted_media
        assert session.media[0].url == "https://cdn.example.com/media/cover.jpg"
        assert session.tags == ["classic"]

    @pytest.mark.asyncio
    async def test_current_path(self, editor, session):
        assert editor.current_path(session) == ["cat-a", "cat-b", "cat-c"]
        assert editor.current_path(session.edit(category_id="gone")) == []

    @pytest.mark.asyncio
    async def test_lookups_fall_back_to_creation_model(self):
        edit_model = {"product": EDIT_MODEL["product"]}
        catalog = FakeCatalogService(
            edit_model=edit_model,
            creation_model={key: EDIT_MODEL[key] for key in ("categories", "authors", "publishers")},
        )

        session = await ProductEditor(catalog).load("p-1")

        assert catalog.creation_model_calls == 1
        assert len(session.categories) == 2
        assert session.author_lookup[0].name == "Antoine de Saint-Exupéry"

    @pytest.mark.asyncio
    async def test_missing_product(self):
        catalog = FakeCatalogService(edit_model={key: EDIT_MODEL[key] for key in ("categories", "authors", "publishers")})

        with pytest.raises(NotFoundError):
            await ProductEditor(catalog).load("p-1")

    @pytest.mark.asyncio
    async def test_blank_product_id(self, editor):
        with pytest.raises(ValidationError) as exc_info:
            await editor.load("  ")

        assert exc_info.value.field == "productId"


class TestBuildSaveCommand:
    @pytest.mark.asyncio
    async def test_valid_session(self, editor, session):
        command = editor.build_save_command(session)

        assert command.category_id == "cat-c"
        assert command.category_path == ["cat-a", "cat-b", "cat-c"]
        assert [op.existing_id for op in command.media] == ["m-1", "m-2"]
        assert all(isinstance(op, KeepMedia) for op in command.media)
        assert command.authors[0].author_name == "Antoine de Saint-Exupéry"
        assert command.authors[0].display_order == 1

    @pytest.mark.asyncio
    async def test_variants_are_normalized(self, editor, session):
        formats = list(session.formats)
        formats[1] = formats[1].model_copy(update={"stock_quantity": 12})

        command = editor.build_save_command(session.edit(formats=formats))

        assert command.formats[0].stock_quantity == 5
        assert command.formats[1].stock_quantity is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "changes, field",
        [
            ({"title": "  "}, "title"),
            ({"description": ""}, "description"),
            ({"category_id": None}, "categoryId"),
            ({"formats": []}, "formats"),
            ({"authors": []}, "authors"),
            ({"publisher_id": ""}, "publisherId"),
            ({"meta_title": ""}, "metaTitle"),
            ({"meta_description": ""}, "metaDescription"),
            ({"meta_keywords": " "}, "metaKeywords"),
        ],
    )
    async def test_missing_required_fields(self, editor, session, changes, field):
        with pytest.raises(ValidationError) as exc_info:
            editor.build_save_command(session.edit(**changes))

        assert exc_info.value.field == field

    @pytest.mark.asyncio
    async def test_form_errors_come_first(self, editor, session):
        bad_format = ProductVariant(format_type="physical", price=0, stock_quantity=1)

        with pytest.raises(ValidationError) as exc_info:
            editor.build_save_command(session.edit(title="", formats=[bad_format]))

        assert exc_info.value.field == "title"

    @pytest.mark.asyncio
    async def test_cover_is_required(self, editor, session):
        gallery_only = [item.model_copy(update={"role": MediaRole.GALLERY}) for item in session.media]

        with pytest.raises(ValidationError) as exc_info:
            editor.build_save_command(session.edit(media=gallery_only))

        assert exc_info.value.field == "media"

    @pytest.mark.asyncio
    async def test_variant_error_names_the_format(self, editor, session):
        formats = [session.formats[0], session.formats[1].model_copy(update={"file_url": None})]

        with pytest.raises(ValidationError) as exc_info:
            editor.build_save_command(session.edit(formats=formats))

        assert exc_info.value.field == "formats[1].file"

    @pytest.mark.asyncio
    async def test_duplicate_cover(self, editor, session, image_upload):
        media = session.media + [MediaItem(role="cover", title="other.jpg", file=image_upload)]

        with pytest.raises(DuplicateRoleError):
            editor.build_save_command(session.edit(media=media))

    @pytest.mark.asyncio
    async def test_stale_category(self, editor, session):
        with pytest.raises(NotFoundError):
            editor.build_save_command(session.edit(category_id="cat-removed"))

    @pytest.mark.asyncio
    async def test_tags_keep_backend_ids(self, editor, session):
        command = editor.build_save_command(session.edit(tags=["classic", "aviation"]))

        assert [(tag.id, tag.name) for tag in command.tags] == [("t-1", "classic"), (None, "aviation")]

    @pytest.mark.asyncio
    async def test_select_category_uses_tree_spelling(self, editor, session):
        updated = editor.select_category(session, " CAT-B")

        assert updated.category_id == "cat-b"
        with pytest.raises(NotFoundError):
            editor.select_category(session, "nope")

    @pytest.mark.asyncio
    async def test_validate_session_reports_everything(self, editor, session):
        bad_format = ProductVariant(format_type="physical", price=0)

        errors = editor.validate_session(session.edit(title="", formats=[bad_format]))

        assert [error.field for error in errors] == ["title", "formats[0].price", "formats[0].stockQuantity"]

    @pytest.mark.asyncio
    async def test_validate_session_clean(self, editor, session):
        assert editor.validate_session(session) == []


class TestFormFields:
    @pytest.mark.asyncio
    async def test_indexed_layout(self, editor, session, image_upload):
        media = session.media[:1] + [MediaItem(role="gallery", title="new.jpg", file=image_upload)]
        command = editor.build_save_command(session.edit(media=media))

        data, files = command.to_form_fields()
        form = dict(data)

        assert form["ProductId"] == "p-1"
        assert form["CategoryId"] == "cat-c"
        assert form["Formats[0].FormatType"] == "physical"
        assert form["Formats[0].Price"] == "100000"
        assert form["Formats[0].StockQuantity"] == "5"
        assert form["Formats[0].IsTrackable"] == "true"
        assert "Formats[1].StockQuantity" not in form
        assert form["Authors[0].AuthorName"] == "Antoine de Saint-Exupéry"
        assert form["Media[0].Id"] == "m-1"
        assert form["Media[0].IsMain"] == "true"
        assert form["Media[1].Id"] == "m-2"
        assert form["Media[1].IsDeleted"] == "true"
        assert "Media[2].Id" not in form
        assert form["Tags[0].Id"] == "t-1"
        assert [key for key, _ in files] == ["Media[2].FormFile"]
        assert isinstance(command.media[2], CreateMedia)


class TestSubmit:
    @pytest.mark.asyncio
    async def test_sends_one_command(self, editor, session, fake_catalog):
        result = await editor.submit(session)

        assert result.success
        assert result.message == "Product updated"
        assert result.media == {"kept": 2, "created": 0, "deleted": 0}
        assert len(fake_catalog.saved) == 1

    @pytest.mark.asyncio
    async def test_nothing_is_sent_on_failure(self, editor, session, fake_catalog):
        with pytest.raises(NotFoundError):
            await editor.submit(session.edit(category_id="cat-removed"))

        with pytest.raises(ValidationError):
            await editor.submit(session.edit(meta_keywords=""))

        assert fake_catalog.saved == []

    @pytest.mark.asyncio
    async def test_service_failure_propagates(self, editor, session, fake_catalog):
        fake_catalog.fail_saves = True

        with pytest.raises(ExternalServiceError):
            await editor.submit(session)


class TestCategoryEditor:
    @pytest.mark.asyncio
    async def test_move_sends_full_row(self, fake_catalog):
        node = await CategoryEditor(fake_catalog).move("cat-c", "cat-d")

        assert node.parent_id == "cat-d"
        category_id, payload = fake_catalog.category_updates[0]
        assert category_id == "cat-c"
        assert payload["ParentId"] == "cat-d"
        assert payload["Title"] == "Novellas"
        assert payload["Slug"] == "novellas"

    @pytest.mark.asyncio
    async def test_move_to_top_level(self, fake_catalog):
        node = await CategoryEditor(fake_catalog).move("cat-b", None)

        assert node.parent_id is None
        assert fake_catalog.category_updates[0][1]["ParentId"] is None

    @pytest.mark.asyncio
    async def test_cycle_is_never_written(self, fake_catalog):
        with pytest.raises(CycleError):
            await CategoryEditor(fake_catalog).move("cat-a", "cat-c")

        assert fake_catalog.category_updates == []

    @pytest.mark.asyncio
    async def test_parent_options(self, fake_catalog):
        options = await CategoryEditor(fake_catalog).parent_options("cat-b")

        assert [option.id for option in options] == ["cat-a", "cat-d"]
