"""
Media role reconciler

Turns the product's persisted media and the editor's working set into the
keep/create/delete operations the catalog service applies on save.
"""
from collections import Counter
from typing import Dict, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from bookcatalog.core.exceptions import DuplicateRoleError, NotFoundError, ValidationError
from bookcatalog.core.logging import log
from bookcatalog.schemas.media import (
    SINGLETON_ROLES,
    CreateMedia,
    DeleteMedia,
    KeepMedia,
    MediaItem,
    MediaOp,
    MediaRole,
)
from bookcatalog.utils.normalization import normalize_id


def _as_items(items: Sequence[Union[MediaItem, dict]], label: str) -> List[MediaItem]:
    result: List[MediaItem] = []
    for position, item in enumerate(items):
        if not isinstance(item, MediaItem):
            try:
                item = MediaItem.model_validate(item)
            except PydanticValidationError as e:
                error = e.errors()[0]
                field = ".".join(str(part) for part in error["loc"]) or "item"
                raise ValidationError(f"{label}[{position}].{field}", error["msg"].removeprefix("Value error, "))
        result.append(item)
    return result


def check_roles(items: Sequence[MediaItem]) -> None:
    """At most one cover and one back cover"""
    counts = Counter(item.role for item in items)
    for role in SINGLETON_ROLES:
        if counts[role] > 1:
            raise DuplicateRoleError(role.value)


def find_role(items: Sequence[MediaItem], role: MediaRole) -> Optional[MediaItem]:
    for item in items:
        if item.role is role:
            return item
    return None


def assign_role(items: Sequence[MediaItem], index: int, role: MediaRole) -> List[MediaItem]:
    """
    Give ``items[index]`` a role. When the role is a singleton slot, whoever
    held it before is demoted to the gallery.
    """
    role = MediaRole.parse(role)
    if not 0 <= index < len(items):
        raise NotFoundError(f"No media item at position {index}", index=index)

    updated = []
    for position, item in enumerate(items):
        if position == index:
            updated.append(item.model_copy(update={"role": role}))
        elif role.is_singleton and item.role is role:
            updated.append(item.model_copy(update={"role": MediaRole.GALLERY}))
        else:
            updated.append(item)
    return updated


def reconcile(
    persisted: Sequence[Union[MediaItem, dict]],
    working: Sequence[Union[MediaItem, dict]],
) -> List[MediaOp]:
    """
    Diff the working media set against what the server has.

    A working item matches a persisted one by backend id, or when it has no
    id by exact (title, url). Output is one keep/delete per persisted item in
    persisted order, then one create per unmatched working item in working
    order.
    """
    persisted = _as_items(persisted, "persisted")
    working = _as_items(working, "media")

    by_id: Dict[str, int] = {}
    by_location: Dict[Tuple[Optional[str], Optional[str]], int] = {}
    for position, item in enumerate(persisted):
        if not item.id:
            raise ValidationError(f"persisted[{position}].id", "persisted media must have an id")
        by_id.setdefault(normalize_id(item.id), position)
        by_location.setdefault((item.title, item.url), position)

    matched: Dict[int, MediaItem] = {}
    new_items: List[MediaItem] = []
    for position, item in enumerate(working):
        if item.file is not None and item.url:
            raise ValidationError(f"media[{position}]", "an item cannot be both a new upload and a stored URL")

        if item.id:
            source = by_id.get(normalize_id(item.id))
            if source is None:
                raise NotFoundError(
                    f"Media '{item.id}' is not attached to this product",
                    media_id=item.id,
                )
        else:
            source = by_location.get((item.title, item.url))

        if source is None:
            if item.file is None:
                raise ValidationError(f"media[{position}].file", "new media needs a file")
            new_items.append(item)
        elif source in matched:
            raise ValidationError(f"media[{position}]", "media item appears more than once")
        else:
            matched[source] = item

    check_roles(list(matched.values()) + new_items)

    ops: List[MediaOp] = []
    for position, original in enumerate(persisted):
        local = matched.get(position)
        if local is None:
            ops.append(DeleteMedia(existing_id=original.id, role=original.role, title=original.title))
        else:
            ops.append(
                KeepMedia(
                    existing_id=original.id,
                    role=local.role,
                    title=local.title or original.title,
                    file=local.file,
                )
            )
    ops.extend(CreateMedia(role=item.role, title=item.title, file=item.file) for item in new_items)

    log.debug(
        "Reconciled media",
        kept=len(matched),
        created=len(new_items),
        deleted=len(persisted) - len(matched),
    )
    return ops


def summarize(ops: Sequence[MediaOp]) -> Dict[str, int]:
    counts = Counter(op.op for op in ops)
    return {"kept": counts["keep"], "created": counts["create"], "deleted": counts["delete"]}
