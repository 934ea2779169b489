"""
Pydantic response models for service status.

Defines the health report returned by the catalog data service.
"""
from pydantic import BaseModel, ConfigDict, Field


class HealthCheckResponse(BaseModel):
    """
    Health check response for the catalog data service.

    Used to verify the service is running and report which components
    are degraded.
    """

    status: str = Field(
        ...,
        description="Overall health status (healthy, degraded)",
    )
    version: str = Field(
        ...,
        description="Service version",
    )
    components: dict[str, str] = Field(
        ...,
        description="Health status of individual components",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "degraded",
                "version": "1.0.0",
                "components": {
                    "redis": "unavailable",
                    "redis_state": "unavailable",
                },
            }
        }
    )
