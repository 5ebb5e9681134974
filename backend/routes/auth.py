# backend/routes/auth.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import token_for_user, get_current_user
from utils.audit import write_log, client_ip
from utils.errors import AuthError, ConflictError
from models.users import User
from schemas import user as schemas
from database import get_db

router = APIRouter(prefix="/auth", tags=["Auth"])

def _auth_response(user: User) -> schemas.AuthResponse:
    return schemas.AuthResponse(user=schemas.UserResponse.model_validate(user), token=token_for_user(user))

# Register a new user and sign them in
@router.post("/signup", response_model=schemas.AuthResponse)
def signup(payload: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    # Normalize email input
    normalized_email = payload.email.strip().lower()

    # Check for existing user
    if db.query(User).filter(User.email == normalized_email).first():
        write_log(db, user_id=None, action="SIGNUP", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": normalized_email, "reason": "Email exists"})
        raise ConflictError("Email already exists")

    new_user = User(name=payload.name, email=normalized_email, password_hash=get_password_hash(payload.password))
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent signup with the same email
        db.rollback()
        raise ConflictError("Email already exists")
    db.refresh(new_user)

    write_log(db, user_id=new_user.id, action="SIGNUP", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"email": new_user.email})
    return _auth_response(new_user)


# Authenticate user and issue a bearer token
@router.post("/login", response_model=schemas.AuthResponse)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    normalized_email = payload.email.strip().lower()
    db_user = db.query(User).filter(User.email == normalized_email).first()

    # No account means no login: signing up is the only way in
    if db_user is None:
        write_log(db, user_id=None, action="LOGIN", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": normalized_email, "reason": "Account not found"})
        raise AuthError("Account not found")

    if not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=db_user.id, action="LOGIN", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": normalized_email, "reason": "Wrong password"})
        raise AuthError("Wrong password")

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"email": db_user.email})
    return _auth_response(db_user)


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
