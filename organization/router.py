from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.database import get_db
from core.errors import not_found
from auth.services.auth_service import get_current_active_user
from authz.deps import require_org_manager, require_super_admin
from notification.mailer import get_mailer

from .schema import (
    AdminChange,
    AdminSchema,
    OrganizationCreatePayload,
    OrganizationCreated,
    OrganizationDelete,
    OrganizationSchema,
    OrganizationUpdate,
)
from . import service

organization_router = APIRouter(prefix="/organizations", tags=["Organizations"])

@organization_router.get("/me", response_model=OrganizationSchema)
def my_organization(
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    ):
    obj = service.get_for_actor(db, user)
    if not obj:
        raise not_found("Organization not found.")
    return obj

@organization_router.get("/me/admins", response_model=list[AdminSchema])
def my_organization_admins(
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    ):
    return service.list_admins(db, user)

# Create the organization and invite its owner
@organization_router.post("", response_model=OrganizationCreated, status_code=status.HTTP_201_CREATED)
def organization_post(
    payload: OrganizationCreatePayload,
    db: Session = Depends(get_db),
    user = Depends(require_super_admin),
    mailer = Depends(get_mailer),
    ):
    return service.create_organization(db, user, payload, mailer)

# Update org
@organization_router.patch("/{org_id}", response_model=OrganizationSchema)
def organization_patch(
    payload: OrganizationUpdate,
    org_id: int,
    db: Session = Depends(get_db),
    user = Depends(require_org_manager),
    ):
    return service.update_details(db, user, org_id, payload)

# Promote / demote admins
@organization_router.post("/{org_id}/admins", response_model=AdminSchema)
def organization_add_admin(
    org_id: int,
    payload: AdminChange,
    db: Session = Depends(get_db),
    user = Depends(require_org_manager),
    ):
    return service.add_admin(db, user, org_id, payload.user_id)

@organization_router.delete("/{org_id}/admins/{user_id}", response_model=AdminSchema)
def organization_remove_admin(
    org_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    user = Depends(require_org_manager),
    ):
    return service.remove_admin(db, user, org_id, user_id)

# Delete org, needs the caller's password again
@organization_router.post("/{org_id}/delete")
def organization_delete(
    org_id: int,
    payload: OrganizationDelete,
    db: Session = Depends(get_db),
    user = Depends(require_super_admin),
    ):
    service.delete_organization(db, user, org_id, payload.password)
    return {"message": "organization deleted"}
