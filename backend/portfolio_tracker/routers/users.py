# backend/portfolio_tracker/routers/users.py
"""
User endpoints.

There is no authentication: a user is just an id that every other
endpoint receives as the `user_id` query parameter.
"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from portfolio_tracker.database import get_db
from portfolio_tracker.dependencies import get_user_service
from portfolio_tracker.middleware.rate_limit import limiter, RATE_LIMIT_WRITE
from portfolio_tracker.models import User
from portfolio_tracker.schemas.users import UserCreate, UserResponse
from portfolio_tracker.services.users import UserService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


@router.post(
    "/",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user",
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_user(
        request: Request,  # Required for rate limiting
        payload: UserCreate,
        db: Session = Depends(get_db),
        service: UserService = Depends(get_user_service),
) -> User:
    """Raises **409** if the email is already registered."""
    return service.create_user(db, email=payload.email, name=payload.name)


@router.get("/{user_id}", response_model=UserResponse, summary="Get a user")
def get_user(
        user_id: int,
        db: Session = Depends(get_db),
        service: UserService = Depends(get_user_service),
) -> User:
    return service.get_user(db, user_id)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user and all their data",
)
def delete_user(
        user_id: int,
        db: Session = Depends(get_db),
        service: UserService = Depends(get_user_service),
) -> Response:
    service.delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
