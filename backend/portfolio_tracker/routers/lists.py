# backend/portfolio_tracker/routers/lists.py
"""
List endpoints.

A list groups a user's positions, transactions and cash flows. Exactly
one list is the default; it cannot be deleted.
"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from portfolio_tracker.database import get_db
from portfolio_tracker.dependencies import get_list_service, get_user
from portfolio_tracker.middleware.rate_limit import limiter, RATE_LIMIT_WRITE
from portfolio_tracker.models import PortfolioList, User
from portfolio_tracker.schemas.lists import ListCreate, ListResponse, ListUpdate
from portfolio_tracker.services.lists import ListService

router = APIRouter(
    prefix="/lists",
    tags=["Lists"],
)


@router.get("/", response_model=list[ListResponse], summary="List a user's lists")
def list_lists(
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: ListService = Depends(get_list_service),
) -> list[PortfolioList]:
    """Default list first, then oldest first."""
    return service.list_lists(db, user.id)


@router.post(
    "/",
    response_model=ListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a list",
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_list(
        request: Request,  # Required for rate limiting
        payload: ListCreate,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: ListService = Depends(get_list_service),
) -> PortfolioList:
    """
    The user's first list always becomes the default.

    Raises **409** if the user already has a list with that name.
    """
    return service.create_list(
        db,
        user.id,
        name=payload.name,
        description=payload.description,
        is_default=payload.is_default,
    )


@router.get("/{list_id}", response_model=ListResponse, summary="Get a list")
def get_list(
        list_id: int,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: ListService = Depends(get_list_service),
) -> PortfolioList:
    return service.get_list(db, user.id, list_id)


@router.patch("/{list_id}", response_model=ListResponse, summary="Rename or describe a list")
def update_list(
        list_id: int,
        payload: ListUpdate,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: ListService = Depends(get_list_service),
) -> PortfolioList:
    return service.update_list(
        db,
        user.id,
        list_id,
        name=payload.name,
        description=payload.description,
    )


@router.post("/{list_id}/default", response_model=ListResponse, summary="Make a list the default")
def set_default_list(
        list_id: int,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: ListService = Depends(get_list_service),
) -> PortfolioList:
    return service.set_default(db, user.id, list_id)


@router.delete(
    "/{list_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a list",
)
def delete_list(
        list_id: int,
        user: User = Depends(get_user),
        db: Session = Depends(get_db),
        service: ListService = Depends(get_list_service),
) -> Response:
    """
    Positions move to the default list (or to no list).

    Raises **400** for the default list.
    """
    service.delete_list(db, user.id, list_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
