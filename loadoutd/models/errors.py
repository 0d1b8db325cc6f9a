"""Error bodies returned by the loadoutd API.

Every non-2xx response carries an ``error`` message; request bodies that
fail validation add one ``validationErrors`` entry per bad field.
"""

from pydantic import Field

from loadoutd.models.base import CamelCaseModel


class ValidationErrorDetail(CamelCaseModel):
    """One rejected field of a compile or profile request.

    Attributes:
        loc: Path to the field, e.g. ["body", "hardware", "cpu"]
        msg: Why the value was rejected
        type: Pydantic error type
    """

    loc: list[str] = Field(..., description="Path to the rejected field")
    msg: str = Field(..., description="Why the value was rejected")
    type: str = Field(..., description="Pydantic error type")


class ErrorResponse(CamelCaseModel):
    """Body of every loadoutd error response.

    Attributes:
        error: Message shown to the user
        validation_errors: Rejected fields, for 422 responses only
    """

    error: str = Field(..., description="Message shown to the user")
    validation_errors: list[ValidationErrorDetail] | None = Field(default=None, description="Rejected fields")
