"""
User endpoints.

CRUD operations for the ``user`` resource under ``/api/users``.  The
handlers decode the request, call ``UserService`` and translate its
``NotFoundError`` and ``ValidationError`` into 404 and 400 responses.
``StorageError`` is left to the application-wide handler, which turns
it into a 500.
"""

import math
from typing import Annotated, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status

from user_api.app.api.deps import get_user_service
from user_api.app.core.errors import NotFoundError, ValidationError
from user_api.app.schemas.common import ErrorResponse
from user_api.app.schemas.user import UserCreate, UserPage, UserRead, UserUpdate
from user_api.app.services.user_service import UserService

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Upper bound of the SERIAL id column.  Also caps ``page`` so the
# computed offset always fits a 64-bit integer.
MAX_USER_ID = 2**31 - 1
MAX_PAGE = MAX_USER_ID

UserId = Annotated[int, Path(ge=1, le=MAX_USER_ID)]

router = APIRouter()

_errors = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
}


def _parse_int(raw: Optional[str], default: int) -> int:
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def resolve_pagination(page: Optional[str], page_size: Optional[str]) -> Tuple[int, int]:
    """Turn raw query values into a usable ``(page, page_size)``.

    Missing or non-numeric values fall back to the defaults; numbers
    are clamped into range instead of being rejected.
    """
    resolved_page = min(MAX_PAGE, max(DEFAULT_PAGE, _parse_int(page, DEFAULT_PAGE)))
    resolved_size = min(MAX_PAGE_SIZE, max(1, _parse_int(page_size, DEFAULT_PAGE_SIZE)))
    return resolved_page, resolved_size


@router.get("", response_model=UserPage)
def list_users(
    page: Optional[str] = Query(None, description="1-based page number"),
    page_size: Optional[str] = Query(None, description=f"Users per page (1-{MAX_PAGE_SIZE})"),
    service: UserService = Depends(get_user_service),
) -> UserPage:
    """List users ordered by id.

    - **page**: defaults to 1, values below 1 are raised to 1 and huge
      values are capped, which yields an empty page.
    - **page_size**: defaults to 10 and is clamped to 1-100.
    """
    page_number, size = resolve_pagination(page, page_size)
    users, total = service.list_users(page_number, size)
    return UserPage(
        data=users,
        total=total,
        page=page_number,
        page_size=size,
        total_pages=math.ceil(total / size),
    )


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED, responses=_errors)
def create_user(
    user: UserCreate,
    service: UserService = Depends(get_user_service),
) -> UserRead:
    """Register a new user.

    The email must not belong to another user and the user must be at
    least 18 years old.
    """
    try:
        return service.create_user(user)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{user_id}", response_model=UserRead, responses=_errors)
def get_user(user_id: UserId, service: UserService = Depends(get_user_service)) -> UserRead:
    try:
        return service.get_user(user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/{user_id}", response_model=UserRead, responses=_errors)
def update_user(
    user_id: UserId,
    body: UserUpdate,
    service: UserService = Depends(get_user_service),
) -> UserRead:
    """Update a user's name, email or age.

    Fields left out of the body keep their stored values.
    """
    try:
        return service.update_user(user_id, body)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_errors,
)
def delete_user(user_id: UserId, service: UserService = Depends(get_user_service)) -> Response:
    try:
        service.delete_user(user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
