"""API models for loadoutd."""

from .base import CamelCaseModel
from .errors import ErrorResponse
from .errors import ValidationErrorDetail
from .requests import CompileRequest
from .requests import HardwareRequest
from .requests import LoadProfileRequest
from .responses import CatalogEntry
from .responses import CatalogResponse
from .responses import CompileResponse
from .responses import DiffLineResponse
from .responses import DiffResponse
from .responses import FragmentSummary
from .responses import LoadedProfileResponse
from .responses import SavedProfileInfo
from .responses import StatusResponse
from .responses import VerifyResponse

__all__ = [
    "CamelCaseModel",
    "CatalogEntry",
    "CatalogResponse",
    "CompileRequest",
    "CompileResponse",
    "DiffLineResponse",
    "DiffResponse",
    "ErrorResponse",
    "FragmentSummary",
    "HardwareRequest",
    "LoadProfileRequest",
    "LoadedProfileResponse",
    "SavedProfileInfo",
    "StatusResponse",
    "ValidationErrorDetail",
    "VerifyResponse",
]
