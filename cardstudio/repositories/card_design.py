from datetime import datetime, timezone

from cardstudio.database import get_db, transport_errors, with_retry

# API field name -> storage column for uploaded assets
_ASSET_COLUMNS = {
    "logo_url": "logo_path",
    "strip_background_url": "strip_background_path",
}


def _to_columns(data: dict) -> dict:
    """Rename API fields to their storage columns."""
    return {_ASSET_COLUMNS.get(key, key): value for key, value in data.items()}


class CardDesignRepository:
    """Card designs stored in Supabase. Every method is one request."""

    @staticmethod
    @transport_errors("create")
    @with_retry()
    def create(business_id: str, **fields) -> dict | None:
        """Create a new card design for a business."""
        db = get_db()
        data = _to_columns(fields)
        data["business_id"] = business_id
        data["is_active"] = False
        result = db.table("card_designs").insert(data).execute()
        return result.data[0] if result and result.data else None

    @staticmethod
    @transport_errors("fetch")
    @with_retry()
    def get_by_id(design_id: str) -> dict | None:
        """Get a card design by ID."""
        db = get_db()
        result = db.table("card_designs").select("*").eq("id", design_id).limit(1).execute()
        return result.data[0] if result and result.data else None

    @staticmethod
    @transport_errors("fetch")
    @with_retry()
    def get_active(business_id: str) -> dict | None:
        """Get the active card design for a business."""
        db = get_db()
        result = (
            db.table("card_designs")
            .select("*")
            .eq("business_id", business_id)
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
        return result.data[0] if result and result.data else None

    @staticmethod
    @transport_errors("list")
    @with_retry()
    def get_all(business_id: str) -> list[dict]:
        """Get all card designs for a business, newest first."""
        db = get_db()
        result = (
            db.table("card_designs")
            .select("*")
            .eq("business_id", business_id)
            .order("created_at", desc=True)
            .execute()
        )
        return result.data if result and result.data else []

    @staticmethod
    @transport_errors("update")
    @with_retry()
    def update(design_id: str, **kwargs) -> dict | None:
        """Update a card design. Only updates provided fields; never touches is_active."""
        data = _to_columns(kwargs)
        data.pop("is_active", None)
        if not data:
            return CardDesignRepository.get_by_id(design_id)
        db = get_db()
        data["updated_at"] = datetime.now(timezone.utc).isoformat()
        result = db.table("card_designs").update(data).eq("id", design_id).execute()
        return result.data[0] if result and result.data else None

    @staticmethod
    @transport_errors("delete")
    @with_retry()
    def delete(design_id: str) -> bool:
        """Delete a card design permanently. Returns True if deleted."""
        db = get_db()
        result = db.table("card_designs").delete().eq("id", design_id).execute()
        return bool(result and result.data and len(result.data) > 0)

    @staticmethod
    @transport_errors("activate")
    @with_retry()
    def set_active(business_id: str, design_id: str) -> dict | None:
        """Activate a design and demote every other design of the business.

        Runs the activate_card_design database function so both updates
        commit together.
        """
        db = get_db()
        result = db.rpc(
            "activate_card_design",
            {"p_business_id": business_id, "p_design_id": design_id},
        ).execute()
        return result.data[0] if result and result.data else None

    @staticmethod
    @transport_errors("count")
    @with_retry()
    def count(business_id: str) -> int:
        """Number of designs owned by a business."""
        db = get_db()
        result = (
            db.table("card_designs")
            .select("id", count="exact")
            .eq("business_id", business_id)
            .execute()
        )
        return result.count or 0
