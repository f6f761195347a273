import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .errors import ConflictError, StoreError

logger = logging.getLogger("shortlinks.crud")


@contextmanager
def store_errors(db: Session):
    try:
        yield
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Store operation failed")
        raise StoreError() from exc


def _active(db: Session):
    return db.query(models.ShortLink).filter(models.ShortLink.is_deleted.is_(False))


def find_by_code(db: Session, code: str, include_deleted: bool = False) -> models.ShortLink | None:
    with store_errors(db):
        if include_deleted:
            return (
                db.query(models.ShortLink)
                .filter_by(code=code)
                .order_by(models.ShortLink.id.desc())
                .first()
            )
        return _active(db).filter_by(code=code).first()


def insert(db: Session, code: str, target_url: str) -> models.ShortLink:
    now = models.utcnow()
    link = models.ShortLink(
        code=code,
        target_url=target_url,
        click_count=0,
        is_deleted=False,
        created_at=now,
        updated_at=now,
    )
    with store_errors(db):
        db.add(link)
        db.commit()
        db.refresh(link)
    return link


def update(db: Session, code: str, **fields) -> models.ShortLink | None:
    with store_errors(db):
        link = _active(db).filter_by(code=code).first()
        if not link:
            return None
        for name, value in fields.items():
            setattr(link, name, value)
        link.updated_at = models.utcnow()
        db.commit()
        db.refresh(link)
    return link


def increment_clicks(db: Session, code: str) -> bool:
    now = models.utcnow()
    with store_errors(db):
        updated = (
            _active(db)
            .filter_by(code=code)
            .update(
                {
                    models.ShortLink.click_count: models.ShortLink.click_count + 1,
                    models.ShortLink.last_clicked_at: now,
                    models.ShortLink.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        db.commit()
    return updated > 0


def list_active(db: Session) -> list[models.ShortLink]:
    with store_errors(db):
        return (
            _active(db)
            .order_by(models.ShortLink.created_at.desc(), models.ShortLink.id.desc())
            .all()
        )
