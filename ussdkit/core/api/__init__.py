from ussdkit.core.api.schemas import UssdRequest, UssdResponse
from ussdkit.core.api.router_factory import create_ussd_router

__all__ = ["UssdRequest", "UssdResponse", "create_ussd_router"]
