"""AWS Lambda entry point.

Mangum translates API Gateway HTTP API (v2) events into ASGI, so the
same FastAPI app serves Lambda. Pair it with ENDPOINT_STORE_BACKEND=dynamodb;
Lambda's filesystem does not survive between invocations.
"""

from mangum import Mangum

from endpoint_proxy.main import app

handler = Mangum(app, lifespan="off")
