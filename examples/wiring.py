from nebula_checkout import Settings
from nebula_checkout.sessions import SessionManager
from nebula_checkout.wire import create_app


manager = SessionManager(Settings().with_creation_latency(seconds=0.3))

fastapi_app = create_app(manager)
# Run yourself with uvicorn and look at the docs!
