from flask_cors import CORS

from storefront.app.backend import BackendClient
from storefront.modules.catalog.gate import SearchGate

# Singletons (initialized in app factory)
backend = BackendClient()
cors = CORS()
search_gate = SearchGate()
