from __future__ import annotations

from storefront.app.config import Config
from storefront.app.factory import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host=Config.APP_HOST, port=Config.APP_PORT, debug=True)
