"""Backend access layer."""

from .results import Failure, ServiceResult, Success
from .service import RemoteFileService, build_http_client

__all__ = ["Failure", "RemoteFileService", "ServiceResult", "Success", "build_http_client"]
