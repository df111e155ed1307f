# roadmap_tracker/config/schema.py
"""
Pydantic models for the .prtrc.json configuration file.

All models use extra="forbid" so typos in config keys are reported instead of being
silently ignored. Scalar types are strict: "true" is not a boolean and 10.0 is not
an integer.
"""

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr
from pydantic import ValidationError as PydanticValidationError

from roadmap_tracker.errors import ValidationError, ValidationErrorDetail

CONFIG_SCHEMA_URL = "https://project-roadmap-tracking.com/schemas/config/v1.json"

PositiveStrictInt = Annotated[int, Field(strict=True, ge=1)]


class CacheConfig(BaseModel):
    """Roadmap cache settings. Keys left out fall back to the repository defaults."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    enabled: StrictBool | None = Field(
        default=None, description="Keep parsed roadmaps in memory between loads"
    )
    max_size: PositiveStrictInt | None = Field(
        default=None, alias="maxSize", description="Maximum number of cached roadmap files"
    )
    watch_files: StrictBool | None = Field(
        default=None, alias="watchFiles", description="Invalidate cache entries on external edits"
    )


class MetadataConfig(BaseModel):
    """Project metadata."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: StrictStr | None = Field(default=None, description="Project name")
    description: StrictStr | None = Field(default=None, description="Project description")


class PrtConfig(BaseModel):
    """
    Root configuration model.

    Example .prtrc.json:
        {
          "$schema": "https://project-roadmap-tracking.com/schemas/config/v1.json",
          "path": "./prt.json",
          "cache": {"maxSize": 5}
        }
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    schema_url: StrictStr | None = Field(default=None, alias="$schema")
    path: StrictStr = Field(..., description="Path to the roadmap JSON file")
    metadata: MetadataConfig | None = None
    cache: CacheConfig | None = None


def validate_config(data: Any) -> PrtConfig:
    """
    Validate a merged config dict.

    Raises:
        ValidationError: Listing every violated constraint, not just the first
    """
    try:
        return PrtConfig.model_validate(data)
    except PydanticValidationError as e:
        details = [
            ValidationErrorDetail(
                type="structure",
                message=err["msg"],
                field="/" + "/".join(str(part) for part in err["loc"]),
            )
            for err in e.errors()
        ]
        raise ValidationError(details) from e
