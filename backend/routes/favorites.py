# backend/routes/favorites.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user
from utils.audit import write_log, client_ip
from utils.errors import ConflictError, NotFoundError
from models.users import User
from models.favorite import Favorite
from schemas.favorite import FavoriteAdd, FavoritesOut, MessageOut

router = APIRouter(prefix="/favorites", tags=["Favorites"])

def _find(db: Session, user_id: int, product_id: str):
    return db.query(Favorite).filter(Favorite.user_id == user_id, Favorite.product_id == product_id).first()

# All favorites of the caller, most recent first
@router.get("", response_model=FavoritesOut)
def list_favorites(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    rows = (
        db.query(Favorite.product_id)
        .filter(Favorite.user_id == current_user.id)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        .all()
    )
    return FavoritesOut(favorites=[r[0] for r in rows])

# Mark a product as favorite
@router.post("", response_model=MessageOut)
def add_favorite(
    payload: FavoriteAdd,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user_id = current_user.id
    product_id = payload.product_id

    if _find(db, user_id, product_id):
        raise ConflictError("Already in favorites")

    db.add(Favorite(user_id=user_id, product_id=product_id))
    try:
        db.commit()
    except IntegrityError:
        # Same product favorited concurrently; the unique constraint kept one row
        db.rollback()
        raise ConflictError("Already in favorites")

    write_log(db, user_id=user_id, action="FAVORITE_ADD", resource="favorites", status="SUCCESS",
              ip=client_ip(request), meta={"product_id": product_id})
    return MessageOut(message="Added to favorites")

# Remove a product from favorites
@router.delete("/{product_id}", response_model=MessageOut)
def remove_favorite(
    product_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user_id = current_user.id
    # Same normalization as on add
    product_id = product_id.strip()
    fav = _find(db, user_id, product_id)
    if not fav:
        raise NotFoundError("Favorite not found")

    db.delete(fav)
    db.commit()

    write_log(db, user_id=user_id, action="FAVORITE_REMOVE", resource="favorites", status="SUCCESS",
              ip=client_ip(request), meta={"product_id": product_id})
    return MessageOut(message="Removed from favorites")
