from cardstudio.database import get_db, transport_errors, with_retry


class BusinessRepository:

    @staticmethod
    @transport_errors("load business for")
    @with_retry()
    def get_by_id(business_id: str) -> dict | None:
        """Get a business by ID (used for its subscription tier)."""
        db = get_db()
        result = (
            db.table("businesses")
            .select("id, name, subscription_tier")
            .eq("id", business_id)
            .limit(1)
            .execute()
        )
        return result.data[0] if result and result.data else None
