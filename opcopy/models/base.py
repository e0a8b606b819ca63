"""Base model for all opcopy Pydantic models.

This module provides a base model class that enforces consistent validation
behavior across all opcopy models.
"""

from pydantic import BaseModel, ConfigDict


class OpcopyBaseModel(BaseModel):
    """Base model class for all opcopy Pydantic models.

    - extra="allow": unknown keys are kept, backend options are free-form
    - str_strip_whitespace=True: values read from YAML are trimmed
    - validate_assignment=True: changes after load are validated too
    """

    model_config = ConfigDict(
        extra="allow",
        str_strip_whitespace=True,
        use_enum_values=True,
        validate_assignment=True,
    )
