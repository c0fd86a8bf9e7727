import re
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

REPO_URL_PATTERN = re.compile(r"[A-Za-z0-9_-]+/[A-Za-z0-9_.-]+")
BRANCH_PATTERN = re.compile(r"[A-Za-z0-9_./-]+")
DEFAULT_BRANCH = "main"


def empty_str_to_none(value: Optional[str]) -> Optional[str]:
    if value == "":
        return None
    return value

def validate_repo_url(value: Optional[str]) -> Optional[str]:
    if value is not None and not REPO_URL_PATTERN.fullmatch(value):
        raise ValueError("Invalid repo_url format. Use: owner/repo")
    return value

def validate_branch(value: Optional[str]) -> Optional[str]:
    if value is not None and not BRANCH_PATTERN.fullmatch(value):
        raise ValueError("Invalid branch name")
    return value

def ensure_env_vars_object(value: Any) -> Any:
    # null -> {} ; array/scalar -> lỗi
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError("env_vars must be an object")
    return value


# Schema cho việc tạo App (input từ API)
class AppCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Display name of the app")
    repo_url: str = Field(..., min_length=1, description="GitHub repository in the form 'owner/repo'")
    branch: str = Field(default=DEFAULT_BRANCH, description="Branch to deploy")
    env_vars: Dict[str, str] = Field(default_factory=dict, description="Environment variables passed to the deploy workflow")

    _check_repo_url = field_validator('repo_url')(validate_repo_url)
    _check_branch = field_validator('branch')(validate_branch)
    _check_env_vars = field_validator('env_vars', mode='before')(ensure_env_vars_object)

    @field_validator('branch', mode='before')
    @classmethod
    def _default_branch(cls, value: Any) -> Any:
        return value or DEFAULT_BRANCH


# Patch record: chỉ các field được gửi lên mới được ghi xuống DB
class AppUpdate(BaseModel):
    name: Optional[str] = Field(None)
    repo_url: Optional[str] = Field(None)
    branch: Optional[str] = Field(None)
    env_vars: Optional[Dict[str, str]] = Field(None)

    _normalize_strings = field_validator('name', 'repo_url', 'branch', mode='before')(empty_str_to_none)
    _check_repo_url = field_validator('repo_url')(validate_repo_url)
    _check_branch = field_validator('branch')(validate_branch)
    _check_env_vars = field_validator('env_vars', mode='before')(ensure_env_vars_object)

    def changes(self) -> Dict[str, Any]:
        """Supplied fields only. A blank name/repo_url/branch counts as not supplied."""
        update_data = self.model_dump(exclude_unset=True)
        return {key: value for key, value in update_data.items() if value is not None}


# Schema cho việc hiển thị App (output cho API)
class AppPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    repo_url: str
    branch: str
    env_vars: Dict[str, str] = Field(default_factory=dict)
    user_id: str
    created_at: Optional[datetime] = None

    # Trạng thái của deployment gần nhất (None nếu app chưa deploy lần nào)
    last_status: Optional[str] = None
    last_url: Optional[str] = None

    @classmethod
    def from_row(cls, db_app: Any, last_status: Optional[str] = None, last_url: Optional[str] = None) -> "AppPublic":
        view = cls.model_validate(db_app)
        return view.model_copy(update={"last_status": last_status, "last_url": last_url})
