"""
Serving — FastAPI application and KServe runtime.

This module exposes the query and ingestion pipelines over HTTP so they
can be deployed as a standalone container or a KServe InferenceService.
"""
