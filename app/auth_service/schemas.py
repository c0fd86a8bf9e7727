from pydantic import BaseModel, Field
from typing import Optional

# --- User token Schemas ---

class UserTokenStore(BaseModel):
    token: Optional[str] = Field(None, description="GitHub access token, encrypted before it is stored")
    username: Optional[str] = Field(None, description="GitHub login of the user")

class UserTokenStored(BaseModel):
    message: str
    user_id: str

class MessageResponse(BaseModel):
    message: str
