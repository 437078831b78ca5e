"""
Version information endpoint.
"""

from fastapi import APIRouter

from ...models.api_models import VersionResponse
from ...models.blocks import BlockType
from ...version import API_VERSION, get_component_versions

router = APIRouter()


@router.get("/version", response_model=VersionResponse)
async def get_version() -> VersionResponse:
    """
    Get current API and component version information.

    Returns:
        Version information and the block types this build understands
    """
    return VersionResponse(
        api_version=API_VERSION,
        components=get_component_versions(),
        block_types=[t.value for t in BlockType],
    )
