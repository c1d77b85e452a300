"""Server-side cookie session store for Starlette/FastAPI applications."""
