from pydantic import BaseModel


class BaseConfig(BaseModel):
    """Base for all configuration models, unknown fields are rejected"""

    class Config:
        extra = "forbid"
