from pydantic import BaseModel, EmailStr, Field

# Claims taken from a verified Firebase ID token
class TokenData(BaseModel):
    firebase_uid: str = Field(..., min_length=1)
    email: EmailStr
