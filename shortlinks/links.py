"""Short link core: registration, redirect resolution and administration.

The store is reached only through :mod:`shortlinks.crud`. Code uniqueness among
live links is guaranteed by a partial unique index, so a generated code that
loses an insert race is simply retried, and a custom code that loses one is a
conflict. Click counts are incremented in SQL, never read-then-written.
"""
import logging
import os

from sqlalchemy.orm import Session

from . import codes, crud, models
from .errors import ConflictError, ExhaustionError, NotFoundError, ValidationError

logger = logging.getLogger("shortlinks.links")

CODE_LENGTH = 6
# No collision-probability guarantee; small because the keyspace (62**6) is
# large relative to expected volume.
MAX_CODE_ATTEMPTS = int(os.getenv("MAX_CODE_ATTEMPTS", 10))


def register_link(db: Session, target_url: str | None, code: str | None = None) -> models.ShortLink:
    if not target_url:
        raise ValidationError("target_url is required")
    if not codes.is_valid_url(target_url):
        raise ValidationError("Invalid URL format")

    if code:
        if not codes.is_valid_code(code):
            raise ValidationError("Custom code must be 6-8 alphanumeric characters")
        if codes.is_reserved(code):
            raise ValidationError(f"Code '{code}' is reserved")
        if crud.find_by_code(db, code):
            raise ConflictError()
        link = crud.insert(db, code, target_url)
        logger.info("Created link %s -> %s (custom)", link.code, target_url)
        return link

    for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
        candidate = codes.generate_code(CODE_LENGTH)
        if codes.is_reserved(candidate) or crud.find_by_code(db, candidate):
            logger.debug("Generated code %s collided (attempt %d)", candidate, attempt)
            continue
        try:
            link = crud.insert(db, candidate, target_url)
        except ConflictError:
            logger.debug("Generated code %s taken on insert (attempt %d)", candidate, attempt)
            continue
        logger.info("Created link %s -> %s", link.code, target_url)
        return link

    logger.warning("Code generation exhausted after %d attempts", MAX_CODE_ATTEMPTS)
    raise ExhaustionError()


def resolve_redirect(db: Session, code: str) -> str:
    link = crud.find_by_code(db, code)
    if not link:
        raise NotFoundError()
    target_url = link.target_url
    # the row can be soft-deleted between lookup and increment
    if not crud.increment_clicks(db, code):
        raise NotFoundError()
    return target_url


def get_link(db: Session, code: str) -> models.ShortLink:
    link = crud.find_by_code(db, code)
    if not link:
        raise NotFoundError()
    return link


def list_links(db: Session) -> list[models.ShortLink]:
    return crud.list_active(db)


def soft_delete_link(db: Session, code: str) -> models.ShortLink:
    link = crud.update(db, code, is_deleted=True)
    if not link:
        raise NotFoundError()
    logger.info("Deleted link %s", code)
    return link
