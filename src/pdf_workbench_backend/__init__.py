"""
PDF Workbench Backend - REST API for editing an in-memory PDF

This package provides a FastAPI-based web service that holds a PDF document
in process memory and lets a browser client build it up page by page:

- Creating and resetting the working document
- Adding letter-size pages with a centred title in a Base-14 font
- Inserting every page of an uploaded PDF at a chosen position
- Serving the result inline for viewing or as an attachment for download
- A shared-secret password check for the UI login screen

Key Components:
    - main: FastAPI application and HTTP endpoint definitions
    - document_store: Lock-protected registry of documents keyed by identifier
    - pdf_operations: Page mutations on top of PyMuPDF
    - positions: Permissive resolution of requested insertion indexes
    - configuration: OmegaConf settings with YAML and environment overrides
    - models: Pydantic models for request/response validation

Usage:
    Run the API server with:
        uvicorn pdf_workbench_backend.main:app --reload --host 0.0.0.0 --port 3000

Documents are never written to disk; restarting the server discards them.
"""
