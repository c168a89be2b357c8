"""swaggergen: assemble OpenAPI documents from an introspected API surface."""

from swaggergen.generator import create_openapi_document
from swaggergen.schemas import ApiSnapshot
from swaggergen.settings import SpecOptions

__all__ = ["ApiSnapshot", "SpecOptions", "create_openapi_document"]
