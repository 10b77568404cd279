"""
Image API Routes - attach URLs from the media upload widget to records
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user
from tourdesk.schemas import ImageCreate
from tourdesk.services.location_service import ImageService, IMAGE_OWNERS
from tourdesk.services.permission_service import PermissionService
from tourdesk.api.v1.serializers import image_dict

router = APIRouter(tags=["Images"])

# owner kind -> permission area
OWNER_AREAS = {
    "locations": "locations",
    "hotels": "locations",
    "tour-packages": "tour_packages",
    "tour-package-queries": "queries",
    "expenses": "expenses",
}

IMAGE_PATH = "/{owner_kind}/{owner_id}/images"


def get_image_service(owner_kind: str, action: str, db: Session, user) -> ImageService:
    if owner_kind not in IMAGE_OWNERS:
        raise HTTPException(status_code=404, detail="Not found")
    permission = f"{OWNER_AREAS[owner_kind]}:{action}"
    if not PermissionService.user_has_permission(user, permission):
        raise HTTPException(status_code=403, detail=f"Missing required permissions: {permission}")
    return ImageService(db, owner_kind)


@router.post(IMAGE_PATH)
async def add_image(
    owner_kind: str,
    owner_id: int,
    image_data: ImageCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Append an uploaded image URL to a record"""
    image = get_image_service(owner_kind, "edit", db, current_user).add(owner_id, image_data.url)
    if not image:
        raise HTTPException(status_code=404, detail="Record not found")
    db.commit()
    return image_dict(image)


@router.delete(IMAGE_PATH + "/{image_id}")
async def delete_image(
    owner_kind: str,
    owner_id: int,
    image_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    if not get_image_service(owner_kind, "edit", db, current_user).delete(owner_id, image_id):
        raise HTTPException(status_code=404, detail="Image not found")
    db.commit()
    return {"message": "Image deleted successfully"}
