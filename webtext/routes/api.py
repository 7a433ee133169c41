from fastapi import APIRouter

from webtext.routes.health import SERVICE_NAME, SERVICE_VERSION, get_git_sha

router = APIRouter()


@router.get("/version")
async def get_version():
    """Return API version + git sha."""
    return {
        "name": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "git_sha": get_git_sha(),
    }
