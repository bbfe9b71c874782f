"""Permission-gated post CRUD. Only the author (or an admin) may change a post."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.api.v1.dependencies import ensure_owner_or_admin, require_permission
from app.core.database import get_db
from app.core.errors import NotFound
from app.core.messages import SuccessMessages
from app.core.responses import api_response, paginated_response
from app.models.post import Post
from app.schemas.auth import Authenticated
from app.schemas.common import IdParams, PaginationQuery
from app.schemas.post import PostCreate, PostOut, PostUpdate
from app.services.validation import ValidatedRequest, validate

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_post_or_404(db: Session, post_id: int) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFound("POST_NOT_FOUND")
    return post


@router.get("/")
def list_posts(
    req: Annotated[ValidatedRequest, Depends(validate(query=PaginationQuery))],
    _identity: Annotated[Authenticated, Depends(require_permission("posts.view"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    query: PaginationQuery = req.query
    total = db.execute(select(func.count()).select_from(Post)).scalar_one()
    posts = (
        db.execute(select(Post).order_by(Post.id).offset(query.offset).limit(query.limit))
        .scalars()
        .all()
    )
    return paginated_response(
        [PostOut.model_validate(p) for p in posts],
        page=query.page,
        limit=query.limit,
        total=total,
        message=SuccessMessages.POSTS_RETRIEVED,
    )


@router.get("/{id}")
def get_post(
    req: Annotated[ValidatedRequest, Depends(validate(params=IdParams))],
    _identity: Annotated[Authenticated, Depends(require_permission("posts.view"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    post = _get_post_or_404(db, req.params.id)
    return api_response(PostOut.model_validate(post), SuccessMessages.POST_RETRIEVED)


@router.post("/", status_code=201)
def create_post(
    req: Annotated[ValidatedRequest, Depends(validate(body=PostCreate))],
    identity: Annotated[Authenticated, Depends(require_permission("posts.create"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Create a post authored by the caller."""
    body: PostCreate = req.body
    post = Post(title=body.title, content=body.content, author_id=identity.user_id)
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("Post created", extra={"post_id": post.id, "author_id": identity.user_id})
    return api_response(PostOut.model_validate(post), SuccessMessages.POST_CREATED, status_code=201)


@router.patch("/{id}")
def update_post(
    req: Annotated[ValidatedRequest, Depends(validate(body=PostUpdate, params=IdParams))],
    identity: Annotated[Authenticated, Depends(require_permission("posts.update"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    post = _get_post_or_404(db, req.params.id)
    ensure_owner_or_admin(identity, post.author_id)
    for field, value in req.body.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(post, field, value)
    db.commit()
    db.refresh(post)
    return api_response(PostOut.model_validate(post), SuccessMessages.POST_UPDATED)


@router.delete("/{id}")
def delete_post(
    req: Annotated[ValidatedRequest, Depends(validate(params=IdParams))],
    identity: Annotated[Authenticated, Depends(require_permission("posts.delete"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    post = _get_post_or_404(db, req.params.id)
    ensure_owner_or_admin(identity, post.author_id)
    db.delete(post)
    db.commit()
    logger.info("Post deleted", extra={"post_id": req.params.id, "by": identity.user_id})
    return api_response(None, SuccessMessages.POST_DELETED)
