from typing import List

from sqlalchemy.orm import Session

from models import Resource, ResourceStatus
from queries.common import apply_updates, stamp_write
from results import QueryResult, store_call
from time_utils import now_utc

RESOURCE_OWNED_FIELDS = {"created_by", "view_count", "is_archived"}


def _visible(db: Session):
    return db.query(Resource).filter(Resource.is_archived.is_(False))


def _published(db: Session):
    return _visible(db).filter(Resource.status == ResourceStatus.PUBLISHED)


@store_call("Failed to create resource")
def create_resource(db: Session, user_id: str, values: dict) -> QueryResult[Resource]:
    resource = Resource(
        created_by=user_id,
        view_count=0,
        is_archived=False,
        **stamp_write(values, insert=True, protected=RESOURCE_OWNED_FIELDS),
    )
    db.add(resource)
    db.commit()
    db.refresh(resource)
    return QueryResult.ok(resource)


@store_call("Failed to fetch resources")
def list_all_resources(db: Session) -> QueryResult[List[Resource]]:
    return QueryResult.ok(_visible(db).order_by(Resource.created_at.desc()).all())


@store_call("Failed to fetch resources")
def list_published_resources(db: Session) -> QueryResult[List[Resource]]:
    return QueryResult.ok(_published(db).order_by(Resource.created_at.desc()).all())


@store_call("Failed to fetch resources")
def list_featured_resources(db: Session) -> QueryResult[List[Resource]]:
    resources = _published(db).filter(Resource.is_featured.is_(True)).order_by(Resource.created_at.desc()).all()
    return QueryResult.ok(resources)


@store_call("Failed to fetch resources")
def list_resources_by_category(db: Session, category: str) -> QueryResult[List[Resource]]:
    resources = _published(db).filter(Resource.category == category).order_by(Resource.created_at.desc()).all()
    return QueryResult.ok(resources)


@store_call("Failed to fetch resource")
def get_resource(db: Session, resource_id: str) -> QueryResult[Resource]:
    resource = _visible(db).filter(Resource.id == resource_id).first()
    if not resource:
        return QueryResult.not_found("Resource")
    return QueryResult.ok(resource)


def _update_resource(db: Session, resource_id: str, values: dict) -> QueryResult[Resource]:
    resource = _visible(db).filter(Resource.id == resource_id).first()
    if not resource:
        return QueryResult.not_found("Resource")
    apply_updates(resource, stamp_write(values, protected=RESOURCE_OWNED_FIELDS))
    db.commit()
    db.refresh(resource)
    return QueryResult.ok(resource)


@store_call("Failed to update resource")
def update_resource(db: Session, resource_id: str, values: dict) -> QueryResult[Resource]:
    """Partial update; keys absent from ``values`` are left alone."""
    return _update_resource(db, resource_id, values)


@store_call("Failed to update resource status")
def set_resource_status(db: Session, resource_id: str, status: ResourceStatus) -> QueryResult[Resource]:
    return _update_resource(db, resource_id, {"status": status})


@store_call("Failed to update featured status")
def set_resource_featured(db: Session, resource_id: str, is_featured: bool) -> QueryResult[Resource]:
    return _update_resource(db, resource_id, {"is_featured": bool(is_featured)})


@store_call("Failed to delete resource")
def archive_resource(db: Session, resource_id: str) -> QueryResult[None]:
    updated = (
        db.query(Resource)
        .filter(Resource.id == resource_id, Resource.is_archived.is_(False))
        .update({Resource.is_archived: True, Resource.updated_at: now_utc()}, synchronize_session=False)
    )
    if not updated:
        db.rollback()
        return QueryResult.not_found("Resource")
    db.commit()
    return QueryResult.ok(None)


@store_call("Failed to record resource view")
def increment_view_count(db: Session, resource_id: str) -> QueryResult[None]:
    # Single statement so concurrent views never lose an increment.
    updated = (
        db.query(Resource)
        .filter(Resource.id == resource_id, Resource.is_archived.is_(False))
        .update({Resource.view_count: Resource.view_count + 1}, synchronize_session=False)
    )
    if not updated:
        db.rollback()
        return QueryResult.not_found("Resource")
    db.commit()
    return QueryResult.ok(None)
