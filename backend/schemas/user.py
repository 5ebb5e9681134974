from pydantic import BaseModel, EmailStr, Field, field_validator

# bcrypt only looks at the first 72 bytes and refuses longer input
PASSWORD_MAX_BYTES = 72


def _check_password_bytes(v: str) -> str:
    if len(v.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"password must be at most {PASSWORD_MAX_BYTES} bytes")
    return v

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str = Field(min_length=4, max_length=72)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        return _check_password_bytes(v)

# Schema for user registration requests
class UserCreate(UserBase):
    name: str = Field(min_length=2, max_length=120)
    password: str = Field(min_length=4, max_length=72)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        return _check_password_bytes(v)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("name must have at least 2 characters")
        return v

# Public profile returned to the client; id is serialized as a string
class UserResponse(BaseModel):
    id: str
    name: str
    email: str

    @field_validator("id", mode="before")
    @classmethod
    def id_as_str(cls, v):
        return str(v)

    class Config:
        from_attributes = True

# Login/signup result: identity and bearer token always travel together
class AuthResponse(BaseModel):
    user: UserResponse
    token: str
