"""
EstudIA Bridge Server Package.

- ``lambda_handler``: AWS Lambda entry point.
- ``dispatcher``: event routing and proxy response rendering.
- ``main``: FastAPI app for running the bridge locally.
"""
