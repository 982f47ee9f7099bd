from functools import lru_cache

from cardstudio.services.design_service import CardDesignService
from cardstudio.services.pass_coordinator import PassCoordinator, create_pass_coordinator


@lru_cache
def get_design_service() -> CardDesignService:
    return CardDesignService()


def get_pass_coordinator() -> PassCoordinator:
    """Dependency to get PassCoordinator."""
    return create_pass_coordinator()
