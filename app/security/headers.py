from fastapi import FastAPI, Request
from starlette.responses import Response


API_PREFIX = '/api/'
BASE_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'Referrer-Policy': 'no-referrer',
}


def install_security_headers(app: FastAPI) -> None:
    @app.middleware('http')
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers.update(BASE_HEADERS)
        # Stock levels and order totals must never be served from a cache.
        if request.url.path.startswith(API_PREFIX):
            response.headers['Cache-Control'] = 'no-store'
        return response
