from fastapi import APIRouter
from cvbuilder.api import ai, auth, cvs, download, files, themes, users

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(cvs.router, prefix="/cvs", tags=["cvs"])
api_router.include_router(ai.router, prefix="/ai", tags=["ai"])
api_router.include_router(files.router, prefix="/files", tags=["files"])
api_router.include_router(download.router, prefix="/download", tags=["download"])
api_router.include_router(themes.router, prefix="/themes", tags=["themes"])
