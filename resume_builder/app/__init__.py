"""Resume builder web application.

Notes:
    1. `app.main.create_app` assembles the FastAPI application.
    2. Settings live in `app.core.config`, persistence in `app.database` and
       `app.models`, and the request handlers under `app.api` and `app.web`.
    3. No disk, network, or database access occurs in this module directly.

"""
