from prometheus_fastapi_instrumentator import Instrumentator

from crm_export import create_app
from crm_export.core.logging import configure_logging

configure_logging()
app = create_app()
instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app)
