from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class DeploymentPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    app_id: str
    status: str
    url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Body của callback từ GitHub Actions. Field nào không gửi thì giữ nguyên giá trị cũ.
class DeploymentStatusUpdate(BaseModel):
    status: Optional[str] = Field(None, description="Status reported by the CI workflow, e.g. SUCCESS or FAILED")
    url: Optional[str] = Field(None, description="Public URL of the deployed app")


class DeployAccepted(BaseModel):
    message: str
    deployment_id: str
