from flask_cors import CORS

from srcmarket.app.upstream import Upstream

# Singletons (initialized in app factory)
cors = CORS()
upstream = Upstream()
