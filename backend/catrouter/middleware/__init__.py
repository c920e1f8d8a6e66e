# Middleware package init
"""
CatRouter - Middleware Package
==============================

What:  Cross-cutting request handling plus the per-route upload parser.

Middleware Chain (order matters!):
    Request → [AccessLog] → [GZip] → [CORS] → Route Handler

    - AccessLog is outermost: it settles the request ID before anything else
      logs, and sees the final status and upload outcome on the way out

Per-route:
    - upload.py: SingleFileUpload dependency, runs before the POST handler
      and rejects forms without exactly one file under the expected field
"""
