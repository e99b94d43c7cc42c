"""
Product edit orchestrator

Loads a product into an ``EditSession`` and, on submit, runs every rule
the catalog relies on before a single save command is sent. A submit that
fails any rule never reaches the catalog service.
"""
from typing import Any, Dict, Iterator, List, Optional

from pydantic import ValidationError as PydanticValidationError

from bookcatalog.core.config import settings
from bookcatalog.core.exceptions import DuplicateRoleError, NotFoundError, ValidationError
from bookcatalog.core.logging import log
from bookcatalog.schemas.category import CategoryPath
from bookcatalog.schemas.media import MediaItem, MediaRole
from bookcatalog.schemas.product import ProductVariant
from bookcatalog.schemas.product_edit import (
    AuthorAssignment,
    AuthorCommand,
    EditSession,
    LookupItem,
    SaveProductCommand,
    SaveResult,
    TagRef,
)
from bookcatalog.services import format_rules
from bookcatalog.services.catalog_client import CatalogService
from bookcatalog.services.category_hierarchy import CategoryHierarchy
from bookcatalog.services.media_reconciler import find_role, reconcile, summarize
from bookcatalog.utils.normalization import blank_to_none, camelize_keys, first_present, parse_decimal, same_id


def _clean(value: Any) -> Optional[str]:
    value = blank_to_none(value)
    return None if value is None else str(value).strip()


def _whole(value: Any) -> Optional[int]:
    number = parse_decimal(value)
    return None if number is None else int(number)


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


class ProductEditor:
    """Service layer for the product edit screen"""

    def __init__(self, catalog: CatalogService):
        self.catalog = catalog

    # ----- Load -----

    async def load(self, product_id: str) -> EditSession:
        """Fetch a product and everything needed to edit it"""
        product_id = (product_id or "").strip()
        if not product_id:
            raise ValidationError("productId", "product id is required")

        model = await self.catalog.get_edit_model(product_id)
        if not model.get("categories") or not model.get("authors") or not model.get("publishers"):
            # Older backends only send lookups with the creation model
            creation = await self.catalog.get_creation_model()
            model = {**creation, **{key: value for key, value in model.items() if value}}

        product = model.get("product")
        if not product:
            raise NotFoundError(f"Product '{product_id}' not found", product_id=product_id)

        hierarchy = CategoryHierarchy(model.get("categories") or [])
        author_lookup = [LookupItem.model_validate(item) for item in model.get("authors") or []]
        publisher_lookup = [LookupItem.model_validate(item) for item in model.get("publishers") or []]

        session = self._session_from_product(camelize_keys(product), product_id)
        session = session.edit(
            categories=hierarchy.roots,
            author_lookup=author_lookup,
            publisher_lookup=publisher_lookup,
            authors=[
                author for author in session.authors
                if any(same_id(author.author_id, item.id) for item in author_lookup)
            ],
        )

        log.info(
            "Loaded product for editing",
            product_id=product_id,
            formats=len(session.formats),
            media=len(session.media),
        )
        return session

    def _session_from_product(self, p: Dict[str, Any], product_id: str) -> EditSession:
        formats: List[ProductVariant] = []
        for index, raw in enumerate(p.get("formats") or []):
            try:
                formats.append(format_rules.parse_variant(raw))
            except ValidationError as e:
                if e.field == "formatType":
                    log.warning("Skipping format with unknown type", product_id=product_id, index=index)
                    continue
                raise e.at(f"formats[{index}]")

        media: List[MediaItem] = []
        for index, record in enumerate(p.get("media") or []):
            try:
                media.append(MediaItem.from_record(record))
            except PydanticValidationError as e:
                raise ValidationError(f"media[{index}].mediaRole", e.errors()[0]["msg"].removeprefix("Value error, "))

        authors: List[AuthorAssignment] = []
        for index, raw in enumerate(p.get("authors") or []):
            raw = camelize_keys(raw)
            if raw.get("authorId") is None:
                continue
            authors.append(
                AuthorAssignment(
                    id=_clean(raw.get("id")),
                    author_id=str(raw["authorId"]).strip(),
                    role=raw.get("role") or "author",
                    display_order=index,
                )
            )

        persisted_tags = []
        for raw in p.get("tags") or []:
            raw = camelize_keys(raw)
            name = raw.get("name")
            if isinstance(name, str) and name.strip():
                persisted_tags.append(TagRef(id=_clean(raw.get("id")), name=name.strip()))

        return EditSession(
            product_id=product_id,
            title=p.get("title") or "",
            subtitle=_clean(p.get("subtitle")),
            description=p.get("description") or "",
            isbn=_clean(p.get("isbn") or p.get("iSBN")),
            publication_date=_clean(p.get("publicationDate")),
            language=_clean(p.get("language")) or settings.default_language,
            pages=_whole(p.get("pages")),
            dimensions=_clean(p.get("dimensions")),
            weight=parse_decimal(p.get("weight")),
            age_group=_clean(p.get("ageGroup")),
            edition=_clean(p.get("edition")),
            series=_clean(p.get("series")),
            volume=_whole(p.get("volume")),
            is_active=bool(p.get("isActive", True)),
            meta_title=p.get("metaTitle") or "",
            meta_description=p.get("metaDescription") or "",
            meta_keywords=p.get("metaKeywords") or "",
            publisher_id=_clean(p.get("publisherId")),
            category_id=_clean(first_present(p, "categoryId", "categoriId")),
            authors=authors,
            formats=formats,
            media=[item.model_copy() for item in media],
            tags=[tag.name for tag in persisted_tags],
            persisted_media=media,
            persisted_tags=persisted_tags,
        )

    # ----- Category selection -----

    def select_category(self, session: EditSession, category_id: str) -> EditSession:
        """Point the product at a category, using the tree's own id spelling"""
        node = CategoryHierarchy(session.categories).find_node(category_id)
        return session.edit(category_id=node.id)

    def current_path(self, session: EditSession) -> CategoryPath:
        """Path of the selected category, empty when nothing valid is selected"""
        if not session.category_id:
            return []
        try:
            return CategoryHierarchy(session.categories).path_to(session.category_id)
        except NotFoundError:
            return []

    # ----- Validation -----

    def _preconditions(self, session: EditSession) -> Iterator[ValidationError]:
        if _blank(session.product_id):
            yield ValidationError("productId", "product id is required")
        if _blank(session.title):
            yield ValidationError("title", "title is required")
        if _blank(session.description):
            yield ValidationError("description", "description is required")
        if _blank(session.category_id):
            yield ValidationError("categoryId", "a category must be selected")
        if not session.formats:
            yield ValidationError("formats", "at least one format (physical, e-book or audiobook) is required")
        if not session.authors:
            yield ValidationError("authors", "at least one author is required")
        if _blank(session.publisher_id):
            yield ValidationError("publisherId", "a publisher must be selected")
        if _blank(session.meta_title):
            yield ValidationError("metaTitle", "meta title is required")
        if _blank(session.meta_description):
            yield ValidationError("metaDescription", "meta description is required")
        if _blank(session.meta_keywords):
            yield ValidationError("metaKeywords", "meta keywords are required")
        if find_role(session.media, MediaRole.COVER) is None:
            yield ValidationError("media", "at least one image with the cover role is required")

    def validate_session(self, session: EditSession) -> List[ValidationError]:
        """Every problem with the form, for per-field display"""
        errors = list(self._preconditions(session))
        for index, variant in enumerate(session.formats):
            errors.extend(error.at(f"formats[{index}]") for error in format_rules.collect_errors(variant))

        try:
            reconcile(session.persisted_media, session.media)
        except ValidationError as e:
            errors.append(e)
        except (DuplicateRoleError, NotFoundError) as e:
            errors.append(ValidationError("media", e.detail))

        if not _blank(session.category_id) and CategoryHierarchy(session.categories).get_node(session.category_id) is None:
            errors.append(ValidationError("categoryId", "selected category no longer exists, reload the categories"))
        return errors

    # ----- Submit -----

    def build_save_command(self, session: EditSession) -> SaveProductCommand:
        """
        Validate the session and assemble the save command.

        Fails fast with the first error: form preconditions, then each
        format, then the media diff, then the category lookup.
        """
        for error in self._preconditions(session):
            raise error

        formats = []
        for index, variant in enumerate(session.formats):
            try:
                format_rules.validate(variant)
            except ValidationError as e:
                raise e.at(f"formats[{index}]")
            formats.append(format_rules.normalize(variant))

        media_ops = reconcile(session.persisted_media, session.media)

        hierarchy = CategoryHierarchy(session.categories)
        category = hierarchy.find_node(session.category_id)
        category_path = hierarchy.path_to(category.id)

        names = {item.id.lower(): item.name for item in session.author_lookup}
        authors = [
            AuthorCommand(
                id=author.id,
                author_id=author.author_id,
                author_name=names.get(author.author_id.strip().lower(), ""),
                role=author.role or None,
                display_order=author.display_order or index + 1,
            )
            for index, author in enumerate(session.authors)
        ]

        persisted_tags = {tag.name: tag.id for tag in session.persisted_tags}
        tags = [TagRef(id=persisted_tags.get(name), name=name) for name in session.tags]

        return SaveProductCommand(
            product_id=session.product_id.strip(),
            title=session.title.strip(),
            subtitle=_clean(session.subtitle),
            description=session.description.strip(),
            isbn=_clean(session.isbn),
            publication_date=_clean(session.publication_date),
            language=_clean(session.language) or settings.default_language,
            pages=session.pages,
            dimensions=_clean(session.dimensions),
            weight=session.weight,
            age_group=_clean(session.age_group),
            edition=_clean(session.edition),
            series=_clean(session.series),
            volume=session.volume,
            is_active=session.is_active,
            meta_title=session.meta_title.strip(),
            meta_description=session.meta_description.strip(),
            meta_keywords=session.meta_keywords.strip(),
            publisher_id=session.publisher_id.strip(),
            category_id=category.id,
            category_path=category_path,
            formats=formats,
            authors=authors,
            media=media_ops,
            tags=tags,
        )

    async def submit(self, session: EditSession) -> SaveResult:
        """Validate, then hand one save command to the catalog service"""
        command = self.build_save_command(session)
        response = await self.catalog.save_product(command)

        counts = summarize(command.media)
        log.info("Saved product", product_id=command.product_id, category_id=command.category_id, **counts)
        return SaveResult(
            success=True,
            product_id=command.product_id,
            message=response.get("message") if isinstance(response, dict) else None,
            media=counts,
        )
