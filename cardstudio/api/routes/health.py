from fastapi import APIRouter

from cardstudio.database import supabase_client

router = APIRouter()


@router.get("/health")
def health():
    return {
        "status": "ok",
        "database": "configured" if supabase_client.is_configured() else "disabled",
    }
